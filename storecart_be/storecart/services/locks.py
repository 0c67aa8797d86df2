import threading
import weakref
from contextlib import contextmanager

_registry_guard = threading.Lock()
# Entries disappear once no request holds the user's lock
_cart_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()


def _lock_for(user_id: int) -> threading.Lock:
    with _registry_guard:
        lock = _cart_locks.get(user_id)
        if lock is None:
            lock = threading.Lock()
            _cart_locks[user_id] = lock
        return lock


@contextmanager
def cart_mutation_lock(user_id: int):
    """Serialize cart read-modify-write cycles for one user within this process.

    Sync FastAPI endpoints run in a thread pool, so a plain thread lock is
    enough here; across processes the cart row lock takes over.
    """
    lock = _lock_for(user_id)
    with lock:
        yield
