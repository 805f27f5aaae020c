from ..core.ports import Frame


class HeadlessFrame(Frame):
    """
    Stand-in for the window frame owning a session when no GUI is attached.
    """

    def __init__(self, siblings: int = 0):
        self.alive = True
        self.siblings = siblings
        self.layout_resets = 0

    def is_alive(self) -> bool:
        return self.alive

    def others_exist(self) -> bool:
        return self.siblings > 0

    def close(self) -> None:
        self.alive = False

    def reset_layout(self) -> None:
        self.layout_resets += 1
