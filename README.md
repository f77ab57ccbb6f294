# huisserver

Building blocks of a small home automation server: the house clock and its
time-message fields, web session ids, parsing and templating for the control
site, connection slots for the site server, LED ceiling strip groups and a UDP
broadcaster.

## Modules

- `huisserver.datafile`: `DataFile` loads a file below a data root and reads
  it line by line (`open`, `read_line`, `read_line_at`, `contents`);
  `expand_id` replaces every `!!ID` marker in a text.
- `huisserver.clock`: `Clock` takes time readings with `update`, runs the
  quarter timer and returns the fields of the short and full time messages
  (`update_field`, `time_field`); `load_time_address` reads
  `Overige/Tijdadres.txt` through a `DataFile`.
- `huisserver.webusers`: `UserRegistry` hands out, looks up (`get_id`,
  returning an `IdLookup`) and expires session ids per user;
  `HostRegistry` keeps random-id host sessions and drops those idle for more
  than ten minutes. `minutes_exceeded` and `host_expired` compare minute
  readings across the hour.
- `huisserver.handoff`: `Handoff` lets the first caller process an item and
  drain everything queued meanwhile, while other callers only queue.
- `huisserver.workerpool`: `WorkerPool` runs submitted calls on grouped worker
  threads and starts a fresh thread when no worker is idle.
- `huisserver.request`: `parse_request` splits a GET request line into URL
  segments; `url_decode`, `url_encode`, `action_code`, `content_kind` and
  `response_header` support answering it.
- `huisserver.template`: `expand` replaces `/*@?@?XY*/` markers in a page
  using a callback; `base60_digit` and `base60_char` convert base-60 digits.
- `huisserver.site`: `SiteServer` serves already accepted sockets on a fixed
  number of slots, queues sockets when all slots are busy and closes
  connections that stay open too long (`check_addresses`). `Connection`
  reads the request and buffers the response.
- `huisserver.udp`: `UdpBroadcaster` sends datagrams to one target and can
  relay the packets it receives.
- `huisserver.ledstrip`: `LedStrip` keeps the variables and grouping of the
  strips of one LED ceiling, applies variable and attach/detach messages and
  produces state messages and a JavaScript array view (`to_json`);
  `LedController` finds a ceiling by device address.

## Example

```python
from huisserver.handoff import Handoff
from huisserver.ledstrip import LedStrip
from huisserver.request import parse_request, url_decode
from huisserver.webusers import UserRegistry

users = UserRegistry(2)
session = users.add_id(0, minute=12)

print(url_decode("lamp%20kamer+1"))
print(parse_request("GET /ind.htm?id=5 HTTP/1.1\r\n\r\n").segments)

ceiling = LedStrip(1, address=40, strip_count=3)
print(ceiling.group_message("A0001"))
print(ceiling.state_messages())

queue = Handoff()
queue.process("message", print)
```

## What it does not do

There is no command to run and no program that ties the parts together.
`SiteServer` does not listen on a port itself: it is given sockets that were
accepted elsewhere, and the page contents are written by the handler passed
to it. Nothing here talks to the home's devices or stores their state beyond
the LED strip variables held in memory; `UdpBroadcaster` only sends and
relays raw datagrams.

The package depends on the standard library only; the tests use pytest
(`pip install .[test]`, then `pytest`).