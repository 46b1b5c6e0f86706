"""The mail accounts dialog: account list, edit form and change summary."""

from dataclasses import dataclass

from .acceditor import Account, EditState
from .connhelper import (
    AuthChoices,
    check_port_value,
    find_protocol_index,
    parse_port_value,
    protocol_at,
)

NEW_ACC_NAME_PREFIX = "new account #"
ACC_CHANGE_INDICATOR = " *"

INF_ACC_CREATED = "{} new account(s) created"
INF_ACC_MODIFIED = "{} account(s) modified"
INF_ACC_DELETED = "{} account(s) deleted"
INF_DELIMITER = ", "

MSG_CHANGE_SAVE_QUESTION = "Configuration has been changed:\n{}\n\nSave?"
MSG_ACC_DELETE_QUESTION = 'Delete account #{} "{}"?'
MSG_ACC_SAVE_ERROR = 'Incorrect data for the account #{} "{}":\n{}'
MSG_PORT_VALUE_TYPE_ERROR = "the port value must be a number between 1 and 65535"


class ValidationError(ValueError):
    """The form holds data that cannot be stored in the account."""


@dataclass
class AccountForm:
    """The values of the edit form; choices are positions in their lists, -1 for none."""

    account_name: str = ""
    email_address: str = ""
    inc_protocol: int = -1
    inc_ssl: bool = False
    inc_server: str = ""
    inc_port: str = ""
    inc_user: str = ""
    inc_auth: int = -1
    out_protocol: int = -1
    out_ssl: bool = False
    out_server: str = ""
    out_port: str = ""
    out_user: str = ""
    out_auth: int = -1


@dataclass
class _ListEntry:
    label: str
    acc_id: int


def _update(obj, attr, value):
    if getattr(obj, attr) == value:
        return False
    setattr(obj, attr, value)
    return True


class MailAccountsDialog:
    """Edits the accounts of an AccountEditor through a single form.

    `form` holds the values shown for the selected account; they are
    written back when another account is selected, one is created, or the
    changes are applied.
    """

    def __init__(self, editor, auth_choices=None):
        self.editor = editor
        self.auth_choices = auth_choices if auth_choices is not None else AuthChoices()
        self._entries = []
        self.current_index = -1
        self.form = self.form_for(-1)

    @property
    def labels(self):
        """The texts of the account list."""
        return [entry.label for entry in self._entries]

    def load_accounts(self):
        """Fill the account list from the editor; returns its labels."""
        for acc_id, name in self.editor.load_accounts().items():
            self._entries.append(_ListEntry(name, acc_id))
        return self.labels

    def _account(self, index):
        if not 0 <= index < len(self._entries):
            return None
        return self.editor.find_account(self._entries[index].acc_id)

    def form_for(self, index):
        """The form values for the account at a list position (blank if none)."""
        acc = self._account(index) or Account()
        inc, out = acc.incoming, acc.outgoing
        choices = self.auth_choices
        return AccountForm(
            account_name=acc.account_name,
            email_address=acc.email_address,
            inc_protocol=find_protocol_index(inc.protocol, True),
            inc_ssl=inc.is_ssl,
            inc_server=inc.server,
            inc_port=str(inc.port) if inc.port > 0 else "",
            inc_user=inc.user_name,
            inc_auth=choices.find_index(inc.auth_type, inc.auth_spec),
            out_protocol=find_protocol_index(out.protocol, False),
            out_ssl=out.is_ssl,
            out_server=out.server,
            out_port=str(out.port) if out.port > 0 else "",
            out_user=out.user_name,
            out_auth=choices.find_index(out.auth_type, out.auth_spec),
        )

    def _show(self, index):
        self.current_index = index
        self.form = self.form_for(index)

    def select(self, index):
        """Store the current form, then show the account at `index`.

        Raises ValidationError, keeping the selection, if the form is invalid.
        """
        self.save_form(self.current_index, self.form)
        self._show(index)
        return self.form

    def _save_connection(self, conn, protocol, ssl, server, port, user, auth, incoming):
        changed = False
        if protocol >= 0:
            changed |= _update(conn, "protocol", protocol_at(protocol, incoming))
        changed |= _update(conn, "is_ssl", ssl)
        changed |= _update(conn, "server", server)
        changed |= _update(conn, "port", parse_port_value(port))
        changed |= _update(conn, "user_name", user)
        if auth >= 0:
            auth_type, auth_spec = self.auth_choices.value_at(auth)
            if (conn.auth_type, conn.auth_spec) != (auth_type, auth_spec):
                conn.auth_type, conn.auth_spec = auth_type, auth_spec
                changed = True
        return changed

    def save_form(self, index, form):
        """Write form values to the account at `index`; True if anything changed."""
        acc = self._account(index)
        if acc is None:
            return False
        if not check_port_value(form.inc_port) or not check_port_value(form.out_port):
            raise ValidationError(
                MSG_ACC_SAVE_ERROR.format(acc.id, acc.display_name(), MSG_PORT_VALUE_TYPE_ERROR)
            )

        changed = _update(acc, "account_name", form.account_name)
        changed |= _update(acc, "email_address", form.email_address)
        changed |= self._save_connection(
            acc.incoming, form.inc_protocol, form.inc_ssl, form.inc_server,
            form.inc_port, form.inc_user, form.inc_auth, True,
        )
        changed |= self._save_connection(
            acc.outgoing, form.out_protocol, form.out_ssl, form.out_server,
            form.out_port, form.out_user, form.out_auth, False,
        )

        if changed and self.editor.set_account_modified(acc.id):
            self._entries[index].label += ACC_CHANGE_INDICATOR
        return changed

    def create_account(self):
        """Store the current form, add an account and select it; returns its position."""
        self.save_form(self.current_index, self.form)
        acc_id = self.editor.create_account()
        self._entries.append(_ListEntry(f"{NEW_ACC_NAME_PREFIX}{acc_id}{ACC_CHANGE_INDICATOR}", acc_id))
        index = len(self._entries) - 1
        self._show(index)
        return index

    def delete_account(self, index):
        """Delete the account at a list position; False if there is none."""
        acc = self._account(index)
        if acc is None:
            return False
        self.editor.delete_account(acc.id)
        del self._entries[index]
        self._show(-1)
        return True

    def change_info(self):
        """(whether anything changed, a summary of the changes)."""
        state = self.editor.edit_state()
        parts = []
        for edit, text in (
            (EditState.CREATED, INF_ACC_CREATED),
            (EditState.MODIFIED, INF_ACC_MODIFIED),
            (EditState.DELETED, INF_ACC_DELETED),
        ):
            count = state.get(edit, 0)
            if count > 0:
                parts.append(text.format(count))
        return bool(state), INF_DELIMITER.join(parts)

    def apply_changes(self):
        """Store the current form and apply all changes; returns the number saved."""
        self.save_form(self.current_index, self.form)
        return self.editor.apply_changes()