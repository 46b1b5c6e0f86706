import pytest

from mailnetlib.acceditor import Account, AccountEditor, EditState


class MemoryStore:
    def __init__(self, accounts, last_id=0, save_limit=None):
        self.accounts = list(accounts)
        self.last_id = last_id
        self.save_limit = save_limit
        self.saved = None

    def load(self):
        return list(self.accounts)

    def save(self, accounts, deleted_ids):
        self.saved = (list(accounts), list(deleted_ids))
        return len(accounts) if self.save_limit is None else self.save_limit


def make_store(**kwargs):
    return MemoryStore(
        [
            Account(id=1, directory="account1", account_name="Work"),
            Account(id=2, directory="account2", email_address="user@example.com"),
        ],
        **kwargs,
    )


def test_load_accounts_returns_names():
    editor = AccountEditor(make_store())
    assert editor.load_accounts() == {1: "Work", 2: "user@example.com"}


def test_loaded_accounts_are_copies():
    store = make_store()
    editor = AccountEditor(store)
    editor.load_accounts()
    editor.find_account(1).account_name = "Home"
    assert store.accounts[0].account_name == "Work"
    assert editor.find_account(1).account_name == "Home"
    assert editor.find_account(42) is None


def test_set_account_modified_once():
    editor = AccountEditor(make_store())
    editor.load_accounts()
    assert editor.set_account_modified(1) is True
    assert editor.set_account_modified(1) is False
    assert editor.set_account_modified(42) is False
    assert editor.edit_state() == {EditState.MODIFIED: 1}


def test_create_account_uses_next_id():
    store = make_store(last_id=5)
    editor = AccountEditor(store)
    editor.load_accounts()
    acc_id = editor.create_account()
    assert acc_id == store.last_id + 1
    assert editor.find_account(acc_id).directory == f"account{acc_id}"
    assert editor.create_account() == acc_id + 1


def test_create_account_after_loaded_ids():
    editor = AccountEditor(make_store(last_id=0))
    editor.load_accounts()
    assert editor.create_account() == 3


def test_delete_created_account_drops_it():
    editor = AccountEditor(make_store())
    editor.load_accounts()
    acc_id = editor.create_account()
    editor.delete_account(acc_id)
    assert editor.find_account(acc_id) is None
    assert editor.edit_state() == {}


def test_delete_loaded_account_marks_it():
    editor = AccountEditor(make_store())
    editor.load_accounts()
    editor.set_account_modified(2)
    editor.delete_account(2)
    assert editor.edit_state() == {EditState.DELETED: 1}


def test_delete_unknown_account():
    editor = AccountEditor(make_store())
    with pytest.raises(KeyError):
        editor.delete_account(7)


def test_apply_changes_saves_and_processes():
    created, deleted = [], []
    store = make_store()
    editor = AccountEditor(store, created.append, deleted.append)
    editor.load_accounts()
    acc_id = editor.create_account()
    editor.delete_account(1)
    assert editor.apply_changes() == 2
    saved, del_ids = store.saved
    assert [acc.id for acc in saved] == [2, acc_id]
    assert del_ids == [1]
    assert [acc.id for acc in created] == [acc_id]
    assert [acc.id for acc in deleted] == [1]


def test_apply_changes_failure_prevents_save():
    def fail(account):
        raise OSError("disk full")

    store = make_store()
    editor = AccountEditor(store, init_resources=fail)
    editor.load_accounts()
    editor.create_account()
    with pytest.raises(OSError):
        editor.apply_changes()
    assert store.saved is None


def test_apply_changes_partial_save():
    store = make_store(save_limit=1)
    editor = AccountEditor(store)
    editor.load_accounts()
    with pytest.raises(RuntimeError):
        editor.apply_changes()


def test_display_name_fallbacks():
    assert Account(id=1, directory="account1").display_name() == "account1"
    assert Account(id=1, directory="d", email_address="user@example.com").display_name() == "user@example.com"