from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class ProbeResultModel:
    """Descriptive metadata of a remote file, resolved without downloading its body."""

    name: str
    size: int
    type: str

    def to_dict(self) -> dict:
        return asdict(self)
