import dataclasses

import pytest

from mailnetlib.acceditor import Account, AccountEditor, Connection, EditState
from mailnetlib.connhelper import AuthChoices, AuthenticationType, ProtocolType
from mailnetlib.mailacccfg import MailAccountsDialog, ValidationError


class MemoryStore:
    def __init__(self, accounts, last_id=0):
        self.accounts = list(accounts)
        self.last_id = last_id
        self.saved = None

    def load(self):
        return list(self.accounts)

    def save(self, accounts, deleted_ids):
        self.saved = (list(accounts), list(deleted_ids))
        return len(accounts)


def make_dialog(specs=()):
    store = MemoryStore(
        [
            Account(
                id=1,
                directory="account1",
                account_name="Work",
                email_address="user@example.com",
                incoming=Connection(ProtocolType.POP3, True, "pop.example.com", 995, "user",
                                    AuthenticationType.USER_PSWD),
            ),
            Account(id=2, directory="account2", account_name="Home"),
        ],
        last_id=2,
    )
    editor = AccountEditor(store)
    dialog = MailAccountsDialog(editor, AuthChoices(specs))
    dialog.load_accounts()
    return dialog, editor, store


def test_load_accounts_labels():
    dialog, _, _ = make_dialog()
    assert dialog.labels == ["Work", "Home"]
    assert dialog.current_index == -1


def test_select_shows_account_values():
    dialog, _, _ = make_dialog()
    form = dialog.select(0)
    assert form.account_name == "Work"
    assert form.inc_server == "pop.example.com"
    assert form.inc_port == "995"
    assert form.out_port == ""
    assert form.inc_ssl is True
    assert dialog.auth_choices.value_at(form.inc_auth) == (AuthenticationType.USER_PSWD, "")


def test_unchanged_form_is_not_modified():
    dialog, editor, _ = make_dialog()
    dialog.select(0)
    assert dialog.save_form(0, dialog.form) is False
    assert editor.edit_state() == {}


def test_changes_are_written_on_select():
    dialog, editor, _ = make_dialog()
    dialog.select(0)
    dialog.form.account_name = "Office"
    dialog.form.inc_port = "110"
    dialog.select(1)
    account = editor.find_account(1)
    assert account.account_name == "Office"
    assert account.incoming.port == 110
    assert dialog.labels[0] == "Work *"
    assert editor.edit_state() == {EditState.MODIFIED: 1}


def test_second_change_adds_no_more_indicator():
    dialog, _, _ = make_dialog()
    dialog.select(0)
    assert dialog.save_form(0, dataclasses.replace(dialog.form, inc_server="a.example.com"))
    assert dialog.save_form(0, dataclasses.replace(dialog.form, inc_server="b.example.com"))
    assert dialog.labels[0] == "Work *"


def test_invalid_port_is_rejected():
    dialog, editor, _ = make_dialog()
    dialog.select(0)
    dialog.form.out_port = "70000"
    with pytest.raises(ValidationError):
        dialog.select(1)
    assert dialog.current_index == 0
    assert editor.find_account(1).outgoing.port == 0


def test_oauth_choice_is_stored():
    dialog, editor, _ = make_dialog(["google"])
    dialog.select(1)
    index = dialog.auth_choices.find_index(AuthenticationType.OAUTH2, "google")
    assert dialog.save_form(1, dataclasses.replace(dialog.form, out_auth=index))
    outgoing = editor.find_account(2).outgoing
    assert (outgoing.auth_type, outgoing.auth_spec) == (AuthenticationType.OAUTH2, "google")


def test_create_account_selects_it():
    dialog, editor, store = make_dialog()
    index = dialog.create_account()
    acc_id = store.last_id + 1
    assert dialog.labels[index] == f"new account #{acc_id} *"
    assert dialog.current_index == index
    assert dialog.form.account_name == ""
    assert editor.find_account(acc_id) is not None


def test_delete_account():
    dialog, editor, _ = make_dialog()
    dialog.select(1)
    assert dialog.delete_account(1) is True
    assert dialog.labels == ["Work"]
    assert dialog.current_index == -1
    assert dialog.delete_account(5) is False
    assert editor.edit_state() == {EditState.DELETED: 1}


def test_change_info():
    dialog, _, _ = make_dialog()
    assert dialog.change_info() == (False, "")
    dialog.select(0)
    dialog.form.account_name = "Office"
    dialog.create_account()
    assert dialog.change_info() == (True, "1 new account(s) created, 1 account(s) modified")


def test_apply_changes_saves_current_form():
    dialog, _, store = make_dialog()
    dialog.select(1)
    dialog.form.email_address = "user@example.com"
    assert dialog.apply_changes() == 2
    saved, deleted = store.saved
    assert saved[1].email_address == "user@example.com"
    assert deleted == []