# helpdex

Indexes installed HTML help documentation and searches it from the
command line.

Help pages are read from bzip2-compressed cache files (`*.cache.bz2`)
below a documentation directory, split into their single HTML documents,
reduced to title and body text, and stored in an index kept per
identifier. Searches combine the given words with "and" or "or" and print
the hits as an HTML list of `help:/` links.

## Installing

    pip install .

The package needs nothing beyond the standard library. Install the
`test` extra to run the tests with pytest.

## Building an index

    helpdex-index --indexdir ~/.cache/help-index --identifier handbook --lang en \
        --docdir /usr/share/doc/HTML

The index is written to `<indexdir>/<identifier>/`. For each
documentation directory the cache files below `<docdir>/<lang>/` are
indexed. `--docdir` may be given several times; without it the
directories `doc/HTML` below `$XDG_DATA_HOME` (default
`~/.local/share`) and each entry of `$XDG_DATA_DIRS` (default
`/usr/local/share:/usr/share`) are used. An empty language or `C` means
`en`.

Running the command again updates the index in place: pages that are new
are added, pages of cache files newer than their indexed copy are
re-indexed, and pages of that language that no longer exist are removed.
An index that is unreadable or has another index version is thrown away
and rebuilt. The command exits with status 1 if `--indexdir` or
`--identifier` is missing or the index cannot be written.

## Searching

    helpdex-search --indexdir ~/.cache/help-index --identifier handbook \
        --words install+network --method and --maxnum 10 --lang en

`--indexdir`, `--identifier`, `--words` and `--method` are required,
`--method` must be `and` or `or`, and `--maxnum` must be a number.
Words are separated by `+` and matched against the lower-cased words of
the indexed pages; hits are ordered by weight, best first. The output
looks like this:

    <ul>
    <li><a href="help:/kate/index.html">kate - The Kate Handbook</a></li>
    </ul>

The command exits with status 1 on bad arguments, a missing index or an
index of another version.

## Using the library

- `helpdex.cachereader.CacheReader` splits a help cache into documents:
  `parse(path)` or `parse_text(text)`, then `documents()` and
  `document(doc_id)`.
- `helpdex.htmltextdump.html_text_dump(data)` returns the `(title, text)`
  of an HTML page and raises `HtmlDumpError` when it has no body.
- `helpdex.index` holds the index itself: `Document`, `IndexDatabase`
  (a directory holding one JSON file; changes are written on `commit()`
  or `close()`), `open_writable_db`, `open_db`, `get_doc_info` and
  `DatabaseVersionMismatch`.
- `helpdex.indexer.build_index` and `helpdex.search.search_index` do the
  work behind the two commands; `helpdex.search.format_results` renders
  `SearchHit` objects as the HTML list shown above.
- `helpdex.searchhandler.SearchHandler.from_file` reads a search handler
  description: the `[Desktop Entry]` group of a `.desktop` file with
  `DocumentTypes`, `SearchCommand`, `SearchUrl`, `IndexCommand`,
  `TryExec`, `SearchBinary` and `SearchBinaryPaths`.
  `load_search_handlers` maps document types to handlers, the first
  directory given winning. `substitute_search_query` fills in the `%i`,
  `%w`, `%m`, `%o`, `%d`, `%l` and `%b` placeholders, and
  `SearchHandler.check_paths` raises `SearchHandlerError` when a program
  a handler names cannot be found.
- `helpdex.navitem.NavigatorItem` is a node of a navigation tree.
- `helpdex.toc.TOC` builds chapter and section items from a cached
  table-of-contents XML file, stamped with the source file's change time
  so that a later build can reuse it.
- `helpdex.scrollkeeper.ScrollKeeperTreeBuilder` turns a ScrollKeeper
  contents list file into navigation items, dropping empty sections
  unless asked to keep them.
- `helpdex.scope.ScopeList` keeps track of which documentation sections
  (`ScopeItem`) a search covers, with the `ScopeSelection` modes
  Default, All, None and Custom, and reads and writes them to a
  configuration mapping.
- `helpdex.docpaths.lang_lookup` finds a documentation file in the
  preferred language; `help_application` and `docbook_source` derive
  the application path and DocBook source of a help page.

## What it does not do

- It has no graphical interface and shows no pages; it offers the data
  behind a help browser's navigation tree, search scope and search.
- It runs no other programs. A `SearchHandler` only produces the command
  line or URL to search with (`search_query`) and the index command
  (`index_command`); running them is up to the caller.
- It does not turn DocBook into a table of contents. `TOC.build` calls a
  `generator(source_file, cache_file)` the caller supplies; without one a
  stale cache is not rebuilt.
- It does not look up the ScrollKeeper contents list; the path of that
  file is passed to `ScrollKeeperTreeBuilder.build`.
- Words are not stemmed. `helpdex.indexer.stemmer_for_language` only
  names the stemmer that belongs to a language.