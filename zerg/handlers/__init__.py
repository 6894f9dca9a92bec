from zerg.handlers import dependencymanager, probes

__all__ = [
    "dependencymanager",
    "probes",
]
