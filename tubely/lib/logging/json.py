import typing as t

from tubely.lib.json import JSONEncoder as BaseJSONEncoder
from tubely.lib.json import JSONValue


def encode_bytes(obj: bytes) -> str:
    lorig = len(obj)
    h = obj[:16].hex()
    s = " ".join([h[i : i + 2] for i in range(0, 32, 2)])

    if lorig > 16:
        s += " ..."
    return f"[{lorig:5}] {s.upper()}"


class JSONEncoder(BaseJSONEncoder):
    """Log-friendly encoder: abbreviates bytes and falls back to ``repr``."""

    def get_encoders(self) -> dict[type, t.Callable[[t.Any], JSONValue]]:
        return {
            **super().get_encoders(),
            bytes: encode_bytes,
        }

    def default(self, o: t.Any) -> JSONValue:
        try:
            return super().default(o)
        except TypeError:
            return repr(o)
