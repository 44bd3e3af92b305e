"""Domain layer for finmerge application."""

# Services are resolved lazily: database.base imports domain.entities, and the
# services import database.base, so eager imports here would be circular.
_SERVICES = {
    "ImportProcessor": "finmerge.domain.import_processor",
    "ConflictAnalyzer": "finmerge.domain.conflicts",
    "RulesEngine": "finmerge.domain.rules",
    "CategoryHierarchyResolver": "finmerge.domain.hierarchy",
    "CategoryService": "finmerge.domain.category",
}


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = list(_SERVICES)
