from __future__ import annotations


class StoreMode:
    """
    Decides whether the remote store or the local fallback store is authoritative.

    The initial state comes from configuration. Once `force_local_mode` is called
    the instance stays local for the rest of its lifetime.
    """

    __slots__ = ("_local",)

    def __init__(self, *, local: bool) -> None:
        self._local = local

    @classmethod
    def from_config(cls, *, local_only: bool, remote_url: str | None) -> StoreMode:
        return cls(local=local_only or not remote_url)

    def is_local_mode(self) -> bool:
        return self._local

    def force_local_mode(self) -> None:
        self._local = True
