class PreconditionViolation(AssertionError):
    """
    Raised when a caller breaks the contract of a Set operation: adding a
    member, removing a non-member, removing from an empty set.

    These are programmer errors. Check ``contains``/``size`` first when unsure.
    """


class Set:
    """
    An unordered collection of unique elements.

    Concrete representations implement the kernel (``add``, ``remove``,
    ``remove_any``, ``contains``, ``size``), ``__iter__`` and the standard
    operations ``new_instance``, ``clear`` and ``transfer_from``. Equality is
    shared: two sets are equal when they hold the same elements, whatever
    their representation.
    """

    def add(self, element):
        raise NotImplementedError

    def remove(self, element):
        raise NotImplementedError

    def remove_any(self):
        raise NotImplementedError

    def contains(self, element):
        raise NotImplementedError

    def size(self):
        raise NotImplementedError

    def new_instance(self):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    def transfer_from(self, source):
        raise NotImplementedError

    def __iter__(self):
        raise NotImplementedError

    def __len__(self):
        return self.size()

    def __contains__(self, element):
        return self.contains(element)

    def __eq__(self, other):
        if not isinstance(other, Set):
            return NotImplemented
        if self is other:
            return True
        if self.size() != other.size():
            return False
        # equal sizes plus uniqueness make one direction enough
        for element in self:
            if not other.contains(element):
                return False
        return True

    __hash__ = None

    def __repr__(self):
        return "{}({{{}}})".format(type(self).__name__,
                                   ", ".join(repr(e) for e in self))

    def _check_transfer_source(self, source):
        if source is self:
            raise PreconditionViolation("Violation of: source is not self")
        if type(source) is not type(self):
            raise PreconditionViolation(
                "Violation of: source is of dynamic type {}".format(type(self).__name__))
