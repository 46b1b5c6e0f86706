# mailnetlib

Building blocks for a desktop mail client: a plain network client and a
single-connection TCP server, a background cache for external resources
referenced by messages, the URL policy of HTML message views, and the
editing session behind a mail accounts dialog.

The package uses only the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Network client

`mailnetlib.netclient.NetClient` opens a raw connection to the host named
by a URL (`pop3`, `pop3s`, `smtp`, `smtps`, `imap`, `imaps`, `http`,
`https`, `ftp`, `ftps`, `telnet`; the `s` schemes use TLS), and also makes
one-shot URL requests.

```python
from mailnetlib.netclient import NetClient

with NetClient(default_timeout_ms=16000) as client:
    client.open("pop3://pop.example.com")
    greeting = client.recv()          # one chunk, as bytes
    client.send("NOOP\r\n")
    reply = client.recv(limit=1024)   # larger chunks raise NetError

page = NetClient(default_user_agent="mailnetlib").exec("https://example.com/")
```

`recv` and `exec` return bytes when no sink is given. With a sink - a
binary stream or a callable - the data is passed on and the number of bytes
delivered is returned; a callable returning `False` interrupts the
transfer. `exec` posts `post_fields` when given and follows redirects.

Failures raise `mailnetlib.rescodes.NetError`, whose `code` is a
`mailnetlib.rescodes.ResultCode`.

## Network server

`mailnetlib.netserver.NetServer` listens on a dotted IPv4 address and talks
to one accepted client at a time.

```python
from mailnetlib.netserver import NetServer

with NetServer() as server:
    server.start("127.0.0.1", 0)
    host, port = server.server_address
    server.connect()                  # blocks until a client arrives
    request = server.recv(4096)
    server.send("HTTP/1.1 200 OK\r\n\r\n")
```

## External resources

`mailnetlib.resources.ExtResMgr` downloads resources in background
threads and keeps what was fetched; a failed download is retried only
after a delay. `ExtResMgr.instance()` gives a process-wide manager.

```python
from mailnetlib.resources import ExtResMgr

manager = ExtResMgr(user_agent="mailnetlib")
manager.start_download("https://example.com/logo.png")
data = manager.get_resource_data("https://example.com/logo.png")  # waits; None if unavailable
```

`InetSchemeHandler` opens FTP and HTTP(S) locations through a manager as
binary streams; `get_protocol` and `can_open_url` classify locations.

## Message content views

- `mailnetlib.schemes.CidSchemeHandler` opens `cid:<content-id>` locations
  through a provider that returns `ContentData`; `NullSchemeHandler`
  refuses every request and notes that one was made.
- `mailnetlib.viewer.HtmlContentViewer` decides, for each image of the
  content, whether to open it, block it or redirect a `cid:` URL to its own
  handler. Internet images are loaded only when `ext_download` is set or
  they are cached; the others are listed in `status.external_images`, and
  `reload_content` starts their download when allowed.
- `mailnetlib.webviewer.WebContentViewer` blocks `http`, `https`, `file`
  and `ftp` resources, reports whether any were asked for, and hands links
  to `confirm_open` and `open_url` callbacks.
- `mailnetlib.viewer.MailMsgFileView` is a base for views of one message
  file.

## Mail accounts

`mailnetlib.acceditor.AccountEditor` tracks created, modified and deleted
`Account` objects and applies the changes to a store you supply: an
object with `load()` returning accounts, a `last_id` attribute, and
`save(accounts, deleted_ids)` returning how many were saved. Optional
`init_resources` and `delete_resources` callables are run for created and
deleted accounts.

```python
from mailnetlib.acceditor import AccountEditor
from mailnetlib.mailacccfg import MailAccountsDialog

dialog = MailAccountsDialog(AccountEditor(store))
dialog.load_accounts()
index = dialog.create_account()
dialog.form.email_address = "someone@example.com"
dialog.form.inc_port = "995"
changed, summary = dialog.change_info()
dialog.apply_changes()
```

`mailnetlib.connhelper` holds the protocol and authentication choices
(`AuthChoices` lists one OAuth 2 choice per provider specification) and
port checks. A port that is not a number between 1 and 65535 makes the
dialog raise `ValidationError`.

## Application set-up

- `mailnetlib.appcfg.load_config` reads the `General` section of a
  configuration file (by default the executable's path with a `.cfg`
  extension) into an `AppConfig`.
- `mailnetlib.appmgr.ApplicationManager` creates the temporary and
  application data directories and a dated log file under `logs/`,
  raising `InitError` on failure; `cleanup` detaches the log.
- `mailnetlib.credentials.CredentialsForm` holds the values of a password
  prompt; `mailnetlib.token.OAuth2Token` holds an OAuth 2 token.

## What this package does not do

It has no POP3, SMTP or other mail protocol client: `NetClient` gives raw
connections, and speaking a protocol over them is left to the caller. It
has no OAuth 2 authorization flow, no account or message storage of its
own (the account store is supplied by the caller), no HTML rendering and
no windows: the viewer and dialog classes hold the decisions and data a
user interface would use. There is no command-line program.