"""
Lazy pull sequences.

A PullSequence hands out one element per pull, can look one element ahead
without consuming it, and signals the end with Exhausted. Every combinator
below is itself a PullSequence that owns and pulls from its upstream, so
pipelines stay lazy and work over infinite sources.
"""

import functools
import logging
import math
import random
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 8

_EMPTY = object()


class Exhausted(StopIteration):
    """Raised by next()/peek() once a sequence has no elements left."""
    pass


class PullSequence(ABC):
    """
    Base of every sequence. Subclasses implement _advance(), which returns
    the next element or raises Exhausted; lookahead and sticky exhaustion
    are handled here.
    """

    def __init__(self):
        self._lookahead = _EMPTY
        self._exhausted = False

    @abstractmethod
    def _advance(self):
        ...

    # --------- protocol ----------
    def next(self):
        if self._lookahead is not _EMPTY:
            value, self._lookahead = self._lookahead, _EMPTY
            return value
        if self._exhausted:
            raise Exhausted()
        try:
            return self._advance()
        except Exhausted:
            self._exhausted = True
            raise

    def peek(self):
        if self._lookahead is _EMPTY:
            self._lookahead = self.next()
        return self._lookahead

    def has_next(self):
        try:
            self.peek()
        except Exhausted:
            return False
        return True

    def is_empty(self):
        return not self.has_next()

    def grab(self, n):
        """Pull up to n elements now. Returns fewer if the sequence runs out."""
        items = []
        try:
            for _ in range(int(n)):
                items.append(self.next())
        except Exhausted:
            pass
        return items

    def to_list(self):
        return list(self)

    def __iter__(self):
        return self

    def __next__(self):
        return self.next()

    # --------- transformation ----------
    def map(self, fn):
        return ProducerSequence(fn(x) for x in self)

    def touch(self, fn):
        """Call fn on each element as it passes through; the element is kept."""
        def body():
            for x in self:
                fn(x)
                yield x
        return ProducerSequence(body())

    # --------- filtering ----------
    def select(self, pred):
        return ProducerSequence(x for x in self if pred(x))

    def reject(self, pred):
        return ProducerSequence(x for x in self if not pred(x))

    def start_when(self, pred):
        """Drop elements until pred holds; the element that satisfied it is kept."""
        def body():
            try:
                while not pred(self.peek()):
                    self.next()
            except Exhausted:
                return
            yield from self
        return ProducerSequence(body())

    def start_after(self, pred):
        """Drop elements up to and including the first one satisfying pred."""
        def body():
            try:
                while not pred(self.next()):
                    pass
            except Exhausted:
                return
            yield from self
        return ProducerSequence(body())

    def do_while(self, pred):
        """Emit while pred holds. The first failing element stays in the source."""
        def body():
            while self.has_next() and pred(self.peek()):
                yield self.next()
        return ProducerSequence(body())

    def do_until(self, pred):
        """Emit until pred holds. The first satisfying element stays in the source."""
        def body():
            while self.has_next() and not pred(self.peek()):
                yield self.next()
        return ProducerSequence(body())

    stop_before = do_until

    def stop_when(self, pred):
        """Emit up to and including the first element satisfying pred."""
        def body():
            while self.has_next():
                yield self.peek()
                if pred(self.next()):
                    return
        return ProducerSequence(body())

    def skip(self, n=1):
        # Running out early is fine; the result is just empty.
        def body():
            for _ in range(int(n)):
                if not self.has_next():
                    return
                self.next()
            yield from self
        return ProducerSequence(body())

    def take(self, n):
        def body():
            for _ in range(int(n)):
                if not self.has_next():
                    return
                yield self.next()
        return ProducerSequence(body())

    # --------- combining ----------
    def cons(self):
        """Concatenate a sequence of sequences: [[1, 2], [3]] -> 1, 2, 3."""
        def body():
            for inner in self:
                yield from ensure_sequence(inner)
        return ProducerSequence(body())

    def weave(self):
        """
        Take the first element of every inner sequence, then the second of
        every one, and so on. A sequence leaves the rotation once it is
        exhausted. The outer sequence must be finite; inner ones need not be.
        """
        def body():
            active = [ensure_sequence(inner) for inner in self]
            while active:
                active = yield from _weave_round(active)
        return ProducerSequence(body())

    def diagonalize(self):
        """
        Cantor-style enumeration of a (possibly infinite) sequence of
        (possibly infinite) sequences. Each step admits one more inner
        sequence at the head of the rotation and then takes one element from
        every admitted sequence that still has one, so every element of
        every inner sequence is reached after finitely many pulls.
        """
        def body():
            admitted = []
            while self.has_next():
                admitted.insert(0, ensure_sequence(self.next()))
                admitted = yield from _weave_round(admitted)
            while admitted:
                admitted = yield from _weave_round(admitted)
        return ProducerSequence(body())

    def randomly(self, n=DEFAULT_POOL_SIZE, rng=None):
        """
        Approximate shuffle through a pool of n buffered elements. Only as
        random as the pool is large, but safe on infinite sources.
        """
        if rng is None:
            rng = random.Random()
        size = max(1, int(n))

        def body():
            pool = self.grab(size)
            while self.has_next():
                index = rng.randrange(len(pool))
                yield pool[index]
                pool[index] = self.next()
            rng.shuffle(pool)
            yield from pool
        return ProducerSequence(body())

    def ltranspose(self):
        """
        Zip the inner sequences into tuples, stopping as soon as any of them
        runs out. No padding.
        """
        def body():
            sequences = [ensure_sequence(inner) for inner in self]
            if not sequences or any(seq.is_empty() for seq in sequences):
                return
            while True:
                try:
                    group = tuple([seq.next() for seq in sequences])
                except Exhausted:
                    return
                yield group
        return ProducerSequence(body())

    # --------- replay (these record the source; it must be finite) ----------
    def cycle(self):
        def body():
            values = []
            for x in self:
                values.append(x)
                yield x
            logger.debug(f"cycle recorded {len(values)} elements")
            if not values:
                return
            while True:
                yield from values
        return ProducerSequence(body())

    def repeat(self, k):
        """Emit the whole source floor(k) times; nothing at all when k < 1."""
        times = math.floor(k)

        def body():
            if times < 1:
                return
            values = []
            for x in self:
                values.append(x)
                yield x
            logger.debug(f"repeat recorded {len(values)} elements, replaying {times - 1} more times")
            for _ in range(times - 1):
                yield from values
        return ProducerSequence(body())


def _weave_round(sequences):
    """Yield one element from each live sequence; return the ones still live."""
    survivors = []
    for seq in sequences:
        if seq.has_next():
            yield seq.next()
            survivors.append(seq)
    return survivors


class ProducerSequence(PullSequence):
    """
    A PullSequence over a resumable computation. Pass a generator (or any
    iterator): each pull resumes it up to its next yield, and returning from
    it ends the sequence.
    """

    def __init__(self, iterator):
        super().__init__()
        self._iterator = iterator

    def _advance(self):
        try:
            return next(self._iterator)
        except StopIteration:
            self._iterator = None
            raise Exhausted() from None
        except RuntimeError as e:
            # A generator body turns an escaping Exhausted into RuntimeError
            if isinstance(e.__cause__, Exhausted):
                self._iterator = None
                raise e.__cause__ from None
            raise


def producer(body):
    """Decorator: calling the generator function returns a ProducerSequence."""
    @functools.wraps(body)
    def factory(*args, **kwargs):
        return ProducerSequence(body(*args, **kwargs))
    return factory


class DeferredSequence(PullSequence):
    """
    Wraps a zero-argument callable returning a finite collection. The
    callable runs once, on the first pull, and its result is cached.
    """

    def __init__(self, computation):
        super().__init__()
        self._computation = computation
        self._materialized = False
        self._collection = None
        self._position = 0

    @property
    def materialized(self):
        return self._materialized

    def _advance(self):
        if not self._materialized:
            # Flag first: a computation that raises is not invoked again
            self._materialized = True
            self._collection = []
            self._collection = list(self._computation())
            logger.debug(f"deferred sequence materialized {len(self._collection)} elements")
        if self._position >= len(self._collection):
            raise Exhausted()
        value = self._collection[self._position]
        self._position += 1
        return value


def deferred(computation):
    return DeferredSequence(computation)


def ensure_sequence(source):
    """
    Return source itself if it is already a PullSequence, otherwise a fresh
    PullSequence positioned at the start of the iterable.
    """
    if isinstance(source, PullSequence):
        return source
    try:
        iterator = iter(source)
    except TypeError:
        raise TypeError(f"cannot make a sequence from {type(source).__name__!r}") from None
    return ProducerSequence(iterator)
