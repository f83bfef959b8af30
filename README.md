# paladin

Building blocks for writing distributed programs declaratively.

Work is described as **operations** (a function from an input to an output)
and **monoids** (an associative way to combine two values, with an identity
element). Directives such as `map` and `fold` chain them together lazily, and
an `IndexedStream` carries each item with its original index so that results
arriving out of order can be put back in order. Around this sit the pieces a
distributed runtime needs: acknowledgement handles, channel interfaces,
coordinated channels that know when they are drained, a queue that pairs
adjacent partial results, retry strategies and runtime configuration.

The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

| Module | What it gives you |
| --- | --- |
| `paladin.operation` | `Operation`, `Monoid`, `AbortSignal`, `is_aborted` |
| `paladin.errors` | `OperationError`, `TransientError`, `FatalError`, `FatalStrategy`, `RetryStrategy`, `ImmediateRetry`, `AfterRetry`, `ExponentialRetry`, `default_retry_strategy` |
| `paladin.directive` | `Directive`, `Functor`, `Foldable`, `Map`, `Fold`, `Literal` |
| `paladin.indexed_stream` | `IndexedStream`, `from_iterable`, `try_from_iterable` |
| `paladin.channel` | `ChannelType`, `Publisher`, `Channel`, `ChannelFactory`, `LeaseGuard` |
| `paladin.coordinated` | `coordinated_channel`, `ChannelState`, `CoordinatedPublisher`, `CoordinatedStream`, `CoordinatedAcker`, `CoordinatedPublisherError`, `PublisherClosedError` |
| `paladin.acker` | `Acker`, `ComposedAcker`, `NoopAcker` |
| `paladin.contiguous` | `Contiguous`, `ContiguousQueue`, `Position`, `Side` |
| `paladin.config` | `Config`, `Serializer`, `RuntimeKind`, `add_config_arguments`, `config_from_namespace`, `parse_config` |
| `paladin.common` | `get_random_routing_key` |
| `paladin.hello_ops` | sample `CharToString` operation and `StringConcat` monoid |

## Operations and monoids

```python
from paladin.operation import Monoid, Operation


class Length(Operation):
    def execute(self, input, abort=None):
        return len(input)


class Sum(Monoid):
    def empty(self):
        return 0

    def combine(self, a, b, abort=None):
        return a + b


assert Length().execute("hello") == 5
assert Sum().execute((2, 3)) == 5
```

A `Monoid` is also an `Operation`: executing it on a pair `(a, b)` calls
`combine(a, b, abort)`.

The abort signal is a `threading.Event` or `None`. `is_aborted(abort)` is
true when the event is present and set. Long-running operations can check it
and stop early by raising a `FatalError`, as `paladin.hello_ops.CharToString`
does: it sleeps `iterations` steps of `step` seconds (9 steps of 0.1 s by
default), checks the signal after each step, and returns `str(input)` if it
was never set. `StringConcat` joins strings, with `""` as its identity.

## Errors and retries

An operation reports failure by raising a subclass of `OperationError`,
whose `err` attribute holds the underlying error (a string is wrapped in an
`Exception`):

* `TransientError(err, retry_strategy=None, fatal_strategy=FatalStrategy.TERMINATE)`
  is expected to go away on retry. Without a retry strategy it uses
  `default_retry_strategy()`, which is `ImmediateRetry(3)`.
* `FatalError(err, strategy=FatalStrategy.TERMINATE)` is not worth retrying.
  `FatalStrategy.TERMINATE` means the computation should end;
  `FatalStrategy.IGNORE` means the error is left alone.

Their messages read `Transient operation error: ...` and
`Fatal operation error: ...`.

`await error.retry(f)` recovers from an error by retrying the coroutine
function `f`. A `FatalError` is raised again unchanged. A `TransientError`
re-runs `f` under its retry strategy, retrying on any `OperationError`; when
the strategy is exhausted it raises a `FatalError` wrapping the last
underlying error, with the transient error's fatal strategy.
`retry_trace(f, tracer)` does the same and passes each error that leads to a
retry to `tracer`. `into_fatal()` converts an error to a `FatalError` and
`fatal_strategy()` reports the strategy that applies once it is fatal.

Retry strategies can also be used directly with `await strategy.retry(f)` or
`retry_trace(f, tracer)`; they retry on any `Exception` and re-raise the last
one when exhausted:

* `ImmediateRetry(max_retries=3)` retries straight away.
* `AfterRetry(max_retries, duration)` waits `duration` seconds between tries.
* `ExponentialRetry(min_duration, max_duration)` waits randomised,
  growing intervals (starting near `min_duration`, growing by 1.5x, capped at
  60 s) and stops once more than `max_duration` seconds have passed.
  `intervals()` yields the unbounded interval sequence.

`max_retries` must be at least 1 and durations must not be negative;
otherwise `ValueError` is raised.

## Directives

`Directive.map(op)` and `Directive.fold(m)` wrap a directive in a `Map` or
`Fold` without evaluating anything. `await directive.run(runtime)` evaluates
it: `Map` runs its input and calls `f_map(op, runtime)` on the result, and
`Fold` calls `f_fold(m, runtime)`. If the input does not evaluate to a
`Functor` (for `Map`) or a `Foldable` (for `Fold`), `TypeError` is raised.

`Literal(value)` lifts a plain value into a chain; running it returns the
literal itself.

## Indexed streams

```python
import asyncio

from paladin.indexed_stream import from_iterable


async def main():
    stream = from_iterable(["a", "b", "c"])
    async for idx, item in stream:
        print(idx, item)


asyncio.run(main())
```

An `IndexedStream` wraps any async iterable of `(index, item)` pairs and is
consumed once. `into_values_sorted()` drains it and returns a list of the
values in index order. `from_iterable` numbers the items of an ordinary
iterable from 0. `try_from_iterable` does the same but treats exception
instances as errors: the first one met is raised while iterating. Running an
`IndexedStream` as a directive returns the stream itself.

## Channels

`paladin.channel` defines the interfaces of inter-process channels:
`Publisher` (`publish`, `close`), `Channel` (`sender`, `receiver`, `close`,
`release`) and `ChannelFactory` (`get(identifier, channel_type)` and
`issue(channel_type)`, which returns an identifier and a channel).
`ChannelType` is `EXACTLY_ONCE` or `BROADCAST`. `get_random_routing_key()`
returns a random five-character alphanumeric string suitable as an
identifier.

`LeaseGuard(channel, pipe)` holds one end of a channel. Attribute access is
forwarded to the pipe, an async-iterable pipe can be iterated through the
guard, and the channel's `release()` is called at most once: by
`guard.release()`, on leaving a `with` block, or when the guard is garbage
collected.

## Coordinated channels

`coordinated_channel(sender, receiver)` binds a `Publisher` and an async
iterable to one `ChannelState` and returns a `CoordinatedPublisher` and a
`CoordinatedStream`.

* Each successful call to `publish` counts one pending send. Publishing after
  the publisher is closed raises `PublisherClosedError`; a failure of the
  inner publisher is raised as `CoordinatedPublisherError`. `close()` closes
  the inner publisher and marks the state closed; so does garbage collection
  of the publisher.
* The stream yields `(item, CoordinatedAcker)` pairs. Acknowledging with
  `ack()` (or `nack()`, which does the same) completes one pending send;
  repeated calls on the same acker have no further effect.
* The stream ends once the publisher is closed and every send has been
  acknowledged, even if the inner iterable would never end by itself.

`paladin.acker` also provides `NoopAcker`, which does nothing, and
`ComposedAcker(fst, snd)`, which acknowledges through `fst` and then, only if
that succeeds, through `snd`.

## Contiguous queue

```python
from dataclasses import dataclass

from paladin.contiguous import Contiguous, ContiguousQueue


@dataclass
class Span(Contiguous):
    start: int
    end: int

    def is_contiguous(self, other):
        return self.end + 1 == other.start or other.end + 1 == self.start

    def key(self):
        return self.start


queue = ContiguousQueue([Span(0, 1), Span(4, 5)])
assert queue.acquire_contiguous_pair_or_queue(Span(6, 7)) == (Span(4, 5), Span(6, 7))
assert queue.acquire_contiguous_pair_or_queue(Span(10, 11)) is None  # queued
```

`ContiguousQueue` stores values by key. `acquire_contiguous_pair_or_queue`
looks for an adjacent value (first the nearest key at or above the new
value's key, then the nearest below), removes it and returns the pair in
left-to-right order; if there is none, the new value is queued and `None` is
returned. `find_contiguous` returns a `Position` with a `Side` (`LHS` or
`RHS`) and the value. `queue`, `dequeue(key)` and `len()` work as expected.
The queue is safe to share between threads.

## Configuration

`Config` holds the runtime settings: `serializer` (`Serializer.POSTCARD` or
`Serializer.CBOR`, default postcard), `runtime` (`RuntimeKind.AMQP` or
`RuntimeKind.IN_MEMORY`, default amqp), `num_workers`, `amqp_uri` and
`task_bus_routing_key`.

`add_config_arguments(parser)` adds these options to an
`argparse.ArgumentParser`, under the heading "Paladin options":

| Option | Environment variable |
| --- | --- |
| `-s`, `--serializer {postcard,cbor}` | `PALADIN_SERIALIZER` |
| `-r`, `--runtime {amqp,in-memory}` | `PALADIN_RUNTIME` |
| `-n`, `--num-workers N` | `PALADIN_NUM_WORKERS` |
| `--amqp-uri URI` | `PALADIN_AMQP_URI` |
| `--task-bus-routing-key KEY` | `PALADIN_TASK_BUS_ROUTING_KEY` |

Environment variables supply the defaults. `config_from_namespace` builds a
`Config` from parsed arguments and raises `ValueError` if the amqp runtime is
chosen without an AMQP URI. `parse_config(argv=None, env=None)` does both
steps, reading from `sys.argv` and `os.environ` unless given others, and
exits through the parser's error handling on bad input.

```python
from paladin.config import RuntimeKind, parse_config

config = parse_config(["--runtime", "in-memory"], env={})
assert config.runtime is RuntimeKind.IN_MEMORY
```

## What this package does not do

* There is no runtime: no in-memory worker pool, no AMQP connection, no
  worker main loop and no task dispatch. `Config` and `RuntimeKind` only
  describe settings; nothing here acts on them.
* `IndexedStream` and `Literal` are not `Functor`s or `Foldable`s, so a chain
  such as `from_iterable(xs).map(op).fold(m)` raises `TypeError` when run.
  Distributed mapping and folding need `Functor` and `Foldable`
  implementations supplied from elsewhere.
* Channels are interfaces only; no concrete queue-backed `Channel` or
  `ChannelFactory` is included.
* No serialization is performed; `Serializer` just names a format.
* There is no command-line program. The configuration helpers are meant to be
  built into your own commands.