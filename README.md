# cmdhttpd

`cmdhttpd` is a small HTTP/1.0 server. It reads one `GET` request line
per connection and runs the matching command on a pool of worker
threads. It answers in plain text, or in indented JSON when the result
is structured.

## Installing

```
pip install .
```

To install the test dependency as well:

```
pip install .[test]
```

## Running

```
cmdhttpd
```

The server listens on port 8080 on every interface. Set the `PORT`
environment variable to use a different port:

```
PORT=9000 cmdhttpd
```

The command takes no options. It logs at INFO level to standard error.
Ctrl+C (SIGINT) or SIGTERM stops it. It then waits half a second for
requests that are still running and closes the listener. If the port
cannot be bound, the command exits with status 1.

## Endpoints

| Path | Parameters | Result |
|------|------------|--------|
| `/fibonacci` | `num` | The N-th Fibonacci number |
| `/createfile` | `name`, `content`, `repeat` | Creates or truncates a file, then writes `content` into it `repeat` times (at least once) |
| `/deletefile` | `name` | Deletes an existing file |
| `/reverse` | `text` | The text reversed |
| `/toupper` | `text` | The text in upper case |
| `/random` | `count`, `min`, `max` | A JSON array of `count` random integers between `min` and `max`, inclusive |
| `/timestamp` | — | The current UTC time in RFC 3339 format, for example `2024-01-02T03:04:05Z` |
| `/hash` | `text` | The SHA-256 digest of the text, in hex |
| `/simulate` | `seconds`, `task` | Sleeps for the given time and names the task in its reply (`tarea` if none is given) |
| `/sleep` | `seconds` | Sleeps for the given time |
| `/loadtest` | `tasks`, `sleep` | Runs N concurrent threads that each sleep for S seconds, and waits for all of them |
| `/status` | — | Server metrics as JSON: `hostname`, `start_time`, `total_connections`, `active_handlers`, `processes` |
| `/help` | — | A list of the endpoints |

File names given to `/createfile` and `/deletefile` must be plain names.
A name that contains `/` or `\` is rejected. Files are created in the
server's working directory.

For example:

```
$ curl --http1.0 'http://localhost:8080/fibonacci?num=10'
55
```

## Status codes

- `400`: the request line could not be read within 5 seconds or is malformed, or a number parameter (`num`, `count`, `min`, `max`, `seconds`, `tasks`, `sleep`) is not a valid integer. A `repeat` that is not a valid integer counts as 1.
- `404`: the path is unknown.
- `405`: the method is not `GET`.
- `500`: the command failed. This happens, for example, with a negative number, an empty `text` for `/hash`, `min` greater than `max`, or a missing file.

## Limitations

- The server reads only the request line. It ignores headers and bodies, and every connection is closed after one response.
- Query values are used as they arrive. They are not URL-decoded, so `%20` and `+` stay as written. Pairs without `=` are ignored.
- The `processes` list in `/status` is filled only through `ServerMetrics.register_process`. The server registers no processes itself, so the list stays empty unless your own code adds entries.

## Using it as a library

The commands can be called directly. Invalid input raises `CommandError`:

```python
from cmdhttpd.commands import fibonacci, reverse, random_numbers, CommandError

fibonacci(10)              # "55"
reverse("abcd")            # "dcba"
random_numbers(3, 1, 10)   # e.g. [4, 9, 1]

try:
    fibonacci(-1)
except CommandError as exc:
    print(exc)
```

The other commands in `cmdhttpd.commands` are `create_file`,
`delete_file`, `hash_text`, `help_text`, `load_test`, `simulate`,
`sleep`, `timestamp` and `to_upper`.

### Worker pools

`cmdhttpd.workers.init_worker_pools()` starts one `WorkerPool` per
command. Each pool has a queue of 100 jobs. The pools for `fibonacci`
and `loadtest` have 4 threads, the pool for `help` has 1, and every other
pool has 2. `cmdhttpd.workers.run(name, *args)` runs a command on its
pool, starts the pools first if they are not running, and returns the
result or raises the command's exception. A `WorkerPool` can also be used
on its own:

```python
from cmdhttpd.workers import WorkerPool

with WorkerPool(pow, workers=2) as pool:
    pool.submit(2, 10)   # 1024
```

### Serving

`cmdhttpd.listener.Listener(port, host="")` binds a socket. `serve()`
accepts connections until `shutdown()` is called. `shutdown()` also
closes the connections that are still open. The `port` property gives
the bound port, so `Listener(0)` picks a free one.
`cmdhttpd.listener.start_listener(port)` binds and serves in one call.
Each connection is handled by `cmdhttpd.handler.handle_connection(conn)`
in its own thread.

### Metrics

`cmdhttpd.status.current_metrics()` returns the shared `ServerMetrics`.
It counts total connections and active handlers, and
`marshal()` returns the `/status` JSON as bytes.
`cmdhttpd.status.init_metrics()` replaces it with a fresh instance.

`cmdhttpd.utils` holds the helpers the server uses:
`parse_query_params`, `write_http_response`, `json_response`,
`sanitize_file_name` and `sha256_hash`.