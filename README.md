# beans

`beans` works with a project's issues ("beans") kept as Markdown files with a
YAML front matter block. It reads and writes those files, reads the project's
`.beans.yml` configuration, checks the links between beans, filters lists of
beans and searches their text in memory.

## Installation

```
pip install .
```

Run the test suite with:

```
pip install .[test]
pytest
```

## Configuration (`beans.config`)

A project is configured through a `.beans.yml` file. `find_config` walks
upwards from a directory to find it, `load` reads it (returning the defaults
when the file does not exist) and `load_from_directory` combines the two:

```python
from beans.config import load_from_directory, default_with_prefix

cfg = load_from_directory(".")
print(cfg.resolve_beans_path())   # absolute path of the beans directory
print(cfg.status_list())          # "in-progress, todo, draft, completed, scrapped"
print(cfg.type_list())            # "milestone, epic, bug, feature, task"
print(cfg.priority_list())        # "critical, high, normal, low, deferred"

cfg = default_with_prefix("proj-")
cfg.save("/path/to/project")      # writes /path/to/project/.beans.yml
```

Only the `beans` section of the file is read: `path`, `prefix`, `id_length`,
`default_status`, `default_type` and `require_if_match`. Missing values fall
back to `.beans`, an ID length of 4, status `todo` and the first type
(`milestone`). Statuses, types and priorities are fixed; `get_status`,
`get_type`, `get_priority` and `get_bean_colors` look up their colours and
descriptions, and `is_archive_status` is true for `completed` and `scrapped`.

## Bean files (`beans.model`)

```python
from beans.model import Bean, build_filename, new_id, parse_filename, slugify

bean = Bean(id=new_id("proj-", 4), title="Fix the login page", status="todo")
bean.slug = slugify(bean.title)            # "fix-the-login-page"
filename = build_filename(bean.id, bean.slug)   # "proj-xxxx--fix-the-login-page.md"
data = bean.render()                       # bytes: front matter and body

loaded = Bean.parse(data.decode("utf-8"))  # raises ValueError on malformed input
loaded.id, loaded.slug = parse_filename(filename)
```

`Bean.parse` reads the title, status, type, priority, tags, parent, blocking
list, timestamps and body; the ID and slug come from the file name.
`is_blocking` and `remove_blocking` work on the blocking list.

## Links (`beans.links`)

`LinkMixin` adds link operations to a store class that provides `_beans`
(a dict from ID to `Bean`), `_lock` (a re-entrant lock), `get(bean_id)`
raising a `LookupError` for unknown IDs, and `_save_to_disk(bean)`:

- `find_incoming_links(target_id)` lists parent and blocking links pointing at a bean.
- `detect_cycle(from_id, link_type, to_id)` returns the path of the cycle a new
  `parent` or `blocking` link would close, or `None`.
- `check_all_links()` returns a `LinkCheckResult` of broken links, self-links
  and cycles, with `has_issues()` and `total_issues()`.
- `remove_links_to(target_id)` and `fix_broken_links()` edit beans, save the
  changed ones and return how many links they removed.
- `validate_parent(bean, parent_id)` raises `ValueError` when the parent is
  missing or of a type not allowed by `valid_parent_types`.

## Filtering (`beans.filters`)

```python
from beans.filters import BeanFilter, apply_filter

todo_bugs = apply_filter(beans, BeanFilter(status=["todo"], type=["bug"]))
```

Each list criterion matches any of its values; all criteria must hold. A bean
without a priority counts as `normal`. Filtering on `is_blocked` needs a third
argument that provides `find_incoming_links`, such as a `LinkMixin` store.

## Search (`beans.search`)

```python
from beans.search import SearchIndex

index = SearchIndex()
index.index_beans(beans)
ids = index.search("login +auth -legacy")   # best match first, at most 100
index.close()
```

Words are matched case-insensitively against each bean's ID, title, tags and
body. A word prefixed with `+` must appear, one prefixed with `-` must not.

## What this package does not do

There is no bean store here that loads a `.beans` directory into memory,
creates, updates, deletes or archives bean files on disk, or watches the
directory for changes; `LinkMixin` expects such a store to be supplied by the
code that uses it. There is also no command-line interface.