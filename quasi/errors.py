

class QuasiError(Exception):
    """ Base class for all quasi errors"""
    pass

class QuasiSyntaxError(QuasiError):
    """ Raised when the reader meets malformed source text"""

class QuasiArityError(QuasiError):
    """ Raised when a macro, function or special form gets the wrong number of arguments"""

class QuasiTypeError(QuasiError):
    """ Raised when a value or node has a shape the operation cannot handle"""

class QuasiUnboundSymbol(QuasiError):
    """ Raised when a symbol or identifier is used before it is bound"""

class InvalidSpliceTarget(QuasiTypeError):
    """ Raised when unquote-splicing is given something other than a sequence of nodes"""

class UnboundMacro(QuasiError):
    """ Raised in strict mode when a form head is neither a macro nor a known operator"""

class ExpansionDepthExceeded(QuasiError):
    """ Raised when nested macro expansion goes deeper than the configured limit"""

    def __init__(self, message: str, depth: int):
        super().__init__(message)
        self.depth = depth

class DuplicateBindingCollision(QuasiError):
    """ Raised when hygienic renaming maps two distinct bindings to one name"""
