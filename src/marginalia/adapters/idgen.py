import secrets

from ..core.ports import IdGenerator


class HexId(IdGenerator):
    """Random session ids, `nbytes` of entropy spelled as hex."""

    def __init__(self, nbytes: int = 4):
        if nbytes < 1:
            raise ValueError(f"Session ids need at least one byte, got {nbytes}")
        self.nbytes = nbytes

    def new_id(self) -> str:
        return secrets.token_hex(self.nbytes)
