"""Lexical scopes for a texcalc session: a global scope that lives as long as the session, plus a stack of scopes pushed
for the duration of each function call.
"""

from contextlib import contextmanager


class Environment:
    """Maps VariableNodes to whatever its owner binds them to (evaluated expressions for the Interpreter, ValueTypes
    for the TypeChecker). Variables are looked up structurally, so x_{1} and x_1 are the same variable.
    """

    def __init__(self, describe=str):
        self.global_scope = {}
        self.scopes = []
        self.describe = describe  # how to print bound values in __str__

    @property
    def depth(self):
        """Number of pushed scopes; 0 at top level."""
        return len(self.scopes)

    def push_scope(self):
        self.scopes.append({})

    def pop_scope(self):
        self.scopes.pop()

    def unwind(self):
        """Drops every pushed scope, back to top level."""
        self.scopes.clear()

    @contextmanager
    def scope(self):
        """Pushes a scope for the duration of the with block. The scope is popped even if the block raises."""
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    def lookup(self, variable):
        """Returns the value bound to variable in the innermost scope that binds it, or None if it is unbound."""
        for scope in reversed([self.global_scope] + self.scopes):
            if variable in scope:
                return scope[variable]
            for bound, value in scope.items():
                if bound.matches(variable):
                    return value
        return None

    def set(self, variable, value):
        """Binds variable in the innermost pushed scope, or globally if no scope is pushed."""
        scope = self.scopes[-1] if self.scopes else self.global_scope
        for bound in list(scope):
            if bound.matches(variable):
                del scope[bound]
        scope[variable] = value

    def bindings(self):
        """Every visible binding as a single dict, inner scopes shadowing outer ones."""
        merged = {}
        for scope in [self.global_scope] + self.scopes:
            merged.update(scope)
        return merged

    def __contains__(self, variable):
        return self.lookup(variable) is not None

    def __str__(self):
        return "\n".join(f"{self.describe(variable)} => {self.describe(value)}"
                         for variable, value in self.bindings().items())
