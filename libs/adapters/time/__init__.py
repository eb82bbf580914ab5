from .fakes import FakeSleeperPort, SystemSleeperPort

__all__ = [
    "SystemSleeperPort",
    "FakeSleeperPort",
]
