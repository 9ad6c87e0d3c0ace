"""
Default substitution for the pluggable parts of the random forest.

Every training entry point accepts either an object supplied by the caller or the
L{rf_default} marker. The marker is resolved with L{DefaultValueChooser} at the
point of use:

    stop = DefaultValueChooser.choose(stop, EarlyStopPolicy(options))
"""

import threading


class DefaultTag(object):
    """
    Process-wide marker meaning "use the built-in default".

    The marker carries no content and is never inspected, only compared by identity.
    Use L{rf_default} to obtain it.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(DefaultTag, cls).__new__(cls)
        return cls._instance

    def __setattr__(self, name, value):
        raise AttributeError("DefaultTag is immutable")

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return rf_default, ()

    def __repr__(self):
        return 'rf_default()'


def rf_default():
    """
    @return: The L{DefaultTag} marker.
    """
    return DefaultTag()


def is_default(value):
    return value is DefaultTag()


class DefaultValueChooser(object):
    """
    Chooses between a value supplied by the caller and the library default.
    """

    @staticmethod
    def choose(value, default):
        """
        @param value: The argument passed by the caller, possibly L{rf_default}().
        @param default: The value to use when the caller asked for the default.
        @return: C{default} if C{value} is the default marker, otherwise C{value}.
        """
        if is_default(value):
            return default
        return value

    @staticmethod
    def choose_type(value, default_type):
        """
        @return: The type that L{choose} will resolve to for C{value}.
        """
        if is_default(value):
            return default_type
        return type(value)
