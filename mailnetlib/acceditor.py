"""Editing session over the configured mail accounts."""

import copy
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum

from .connhelper import AuthenticationType, ProtocolType

_log = logging.getLogger(__name__)

DEFAULT_ACC_DIR_NAME_PREFIX = "account"


class EditState(IntEnum):
    """What has happened to an account during editing."""

    NONE = 0
    CREATED = 1
    MODIFIED = 2
    DELETED = 3


@dataclass
class Connection:
    """Settings of an incoming or outgoing mail server connection."""

    protocol: ProtocolType = ProtocolType.NONE
    is_ssl: bool = False
    server: str = ""
    port: int = 0
    user_name: str = ""
    auth_type: AuthenticationType = AuthenticationType.NONE
    auth_spec: str = ""


@dataclass
class Account:
    """A mail account and the directory holding its data."""

    id: int = 0
    directory: str = ""
    account_name: str = ""
    email_address: str = ""
    incoming: Connection = field(default_factory=Connection)
    outgoing: Connection = field(default_factory=Connection)

    def display_name(self):
        """The account name, else the e-mail address, else the directory."""
        return self.account_name or self.email_address or self.directory


@dataclass
class _Entry:
    account: Account
    state: EditState = EditState.NONE


class AccountEditor:
    """Tracks account edits and applies them to a store.

    The store provides `load()` returning accounts, `last_id`, the highest
    id ever given out, and `save(accounts, deleted_ids)` returning how many
    accounts were saved. `init_resources` and `delete_resources` are called
    with created and deleted accounts when changes are applied.
    """

    def __init__(self, store, init_resources=None, delete_resources=None):
        self.store = store
        self.init_resources = init_resources
        self.delete_resources = delete_resources
        self._entries = []

    def _find_entry(self, acc_id):
        return next((entry for entry in self._entries if entry.account.id == acc_id), None)

    def load_accounts(self):
        """Take the accounts from the store; returns their names by id."""
        result = {}
        for account in self.store.load():
            account = copy.deepcopy(account)
            self._entries.append(_Entry(account))
            result[account.id] = account.display_name()
        return result

    def find_account(self, acc_id):
        """The account being edited with this id, or None."""
        entry = self._find_entry(acc_id)
        return entry.account if entry is not None else None

    def set_account_modified(self, acc_id):
        """Mark an unchanged account as modified; True when it was marked."""
        entry = self._find_entry(acc_id)
        if entry is not None and entry.state is EditState.NONE:
            entry.state = EditState.MODIFIED
            return True
        return False

    def create_account(self):
        """Add a new account and return its id."""
        acc_id = max([self.store.last_id, *(entry.account.id for entry in self._entries)]) + 1
        directory = f"{DEFAULT_ACC_DIR_NAME_PREFIX}{acc_id}"
        self._entries.append(_Entry(Account(id=acc_id, directory=directory), EditState.CREATED))
        return acc_id

    def delete_account(self, acc_id):
        """Mark a stored account as deleted, or drop one created in this session."""
        entry = self._find_entry(acc_id)
        if entry is None:
            raise KeyError(acc_id)
        if entry.state in (EditState.NONE, EditState.MODIFIED):
            entry.state = EditState.DELETED
        else:
            self._entries.remove(entry)

    def edit_state(self):
        """How many accounts are in each changed state."""
        return dict(Counter(e.state for e in self._entries if e.state is not EditState.NONE))

    def apply_changes(self):
        """Prepare created accounts, clean up deleted ones and save.

        Every account is processed; if any of them failed, the last failure
        is raised and nothing is saved. Returns the number of accounts saved.
        """
        errors = []
        for entry in self._entries:
            if entry.state is EditState.CREATED:
                action, done = self.init_resources, "resources initialized"
            elif entry.state is EditState.DELETED:
                action, done = self.delete_resources, "resources deleted"
            else:
                continue
            if action is None:
                continue
            try:
                action(entry.account)
            except Exception as exc:
                _log.error("acc#%d %s failed: %s", entry.account.id, entry.state.name.lower(), exc)
                errors.append(exc)
            else:
                _log.info("acc#%d %s", entry.account.id, done)
        if errors:
            raise errors[-1]
        return self._save()

    def _save(self):
        save_items = [e.account for e in self._entries if e.state is not EditState.DELETED]
        del_ids = [e.account.id for e in self._entries if e.state is EditState.DELETED]
        saved = self.store.save(save_items, del_ids)
        if saved < len(save_items):
            _log.error("some accounts (%d of %d) couldn't be saved", len(save_items) - saved, len(save_items))
            raise RuntimeError(f"only {saved} of {len(save_items)} accounts were saved")
        _log.info("saved %d account(s), %d deleted", saved, len(del_ids))
        return saved