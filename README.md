# namuki

The server-side core of a wiki engine, as a Python library. It provides:

- **Storage access** over SQLite or MySQL (`namuki.db`), with retries while the
  database is locked and query adjustments for MySQL (`random()` and
  `collate nocase`).
- **Permissions**: authority groups and the rights they imply
  (`namuki.auth`), bans by exact name, regular expression or CIDR range
  (`namuki.ipban`), and per-document, per-discussion, per-vote and per-board
  access rules (`namuki.acl.check_acl`).
- **User display**: hashed IP addresses, display names, levels, ban marks and
  the user tool menu (`namuki.users`).
- **Settings**: document settings, wiki settings, skins, domain and the values
  a page template needs (`namuki.settings`), and interface text from language
  files (`namuki.language`).
- **Markup rendering**: Namumark, Macromark and Markdown (`namuki.namumark`,
  `namuki.macromark`, `namuki.markdown`, `namuki.render`), plus the Monimark
  to Namumark conversion (`namuki.monimark`).
- **JSON API handlers** for raw documents, rendering, document settings, watch
  lists and cross references (`namuki.api`).
- Notifications (`namuki.alarm.send_alarm`), mail through a configured SMTP
  server (`namuki.email.send_email`, raising `EmailError` on failure), and
  small helpers for hashing, escaping, time and request headers
  (`namuki.util`).

## Installation

```
pip install namuki
```

For running the tests:

```
pip install "namuki[test]"
pytest
```

## Connecting to the database

Database settings are passed once, as a JSON object:

```python
from namuki.db import init_db, connect

init_db('{"db_type": "sqlite", "db_name": "data"}')

with connect() as db:
    row = db.query_row("select data from data where title = ?", "FrontPage")
```

With `"db_type": "sqlite"` the file `<db_name>.db` is opened in WAL mode; any
other type connects to MySQL using the `db_mysql_user`, `db_mysql_pw`,
`db_mysql_host` and `db_mysql_port` settings. Queries always use `?`
placeholders. `Database` offers `execute` (commits), `query` (all rows),
`query_row` (first row or `None`) and `close`, and works as a context manager.

## Rendering a document

```python
from namuki.db import connect
from namuki.render import get_render, list_markup

print(list_markup())

with connect() as db:
    result = get_render(db, "FrontPage", "'''bold''' and ''italic''", "api_view")
    print(result["data"])     # HTML wrapped in the render container
    print(result["js_data"])  # script to run after the HTML is placed
```

For the render types `api_view`, `api_from`, `api_include` and `backlink` the
markup comes from the document's own `document_markup` setting when one is
set; otherwise the wiki-wide `markup` setting is used, falling back to
Namumark. Markups other than `namumark`, `macromark` and `markdown` return the
text unchanged. A `backlink` render also replaces the document's stored links
and link count.

## Checking permissions

```python
from namuki.acl import check_acl
from namuki.db import connect

with connect() as db:
    can_view = check_acl(db, "FrontPage", "", "render", "192.0.2.10")
    can_edit = check_acl(db, "FrontPage", "", "document_edit", "192.0.2.10")
    is_owner = check_acl(db, "", "", "owner_auth", "some_user")
```

A name containing `.` or `:` is treated as an IP address, anything else as a
registered user.

## API handlers

Each handler takes a `namuki.util.RequestConfig` holding the request's JSON
parameters and the client's address, opens its own connection with
`namuki.db.connect()`, and returns a JSON string:

```python
from namuki.api import api_w_raw
from namuki.util import RequestConfig

config = RequestConfig(other_set='{"name": "FrontPage"}', ip="192.0.2.10")
print(api_w_raw(config))  # {"data":"...","response":"ok","title":"FrontPage"}
```

Available handlers: `api_w_raw`, `api_w_render`, `api_w_set`,
`api_w_set_reset`, `api_w_watch_list` and `api_w_xref`.

## Files read at run time

- `namuki.language.get_language` reads `<lang_dir>/<language>.json`
  (`./lang` by default), where the language comes from the wiki's `language`
  setting (`ko-KR` when unset).
- `namuki.settings.get_skin_list` and `get_use_skin_name` list the skin
  directories under `views` (or the `views_dir` given); `get_wiki_set` and
  `get_use_skin_name` raise `FileNotFoundError` when there is none.

## What the package does not do

It is a library only. There is no HTTP server or routing, no command-line
program, no page templates, and no creation of the database tables: the
handlers and functions expect an existing wiki database and are meant to be
called from a web application that supplies the request data.