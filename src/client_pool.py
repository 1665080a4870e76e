from typing import Dict, Iterator, Optional, Tuple

from models import ClientAccount


class ClientPool:
    """
    Client accounts keyed by client id.
    Accounts are created on first reference and never removed.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create a new zero-balance, unlocked one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def iterate_ordered(self) -> Iterator[Tuple[int, ClientAccount]]:
        """Yield (client_id, account) pairs in ascending client id order."""
        for client_id in sorted(self._accounts):
            yield client_id, self._accounts[client_id]

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
