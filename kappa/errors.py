class KappaError(Exception):
    """ Base class for all Kappa errors"""
    pass

class KappaInvalidSymbol(KappaError):
    """ Raised when an invalid symbol is used"""
    pass

class KappaUnboundSymbol(KappaError):
    """ Raised when a symbol is used before it is bound"""
    pass

class KappaSyntaxError(KappaError):
    """ Raised when there is a syntax error"""

class KappaArityError(KappaError):
    """ Raised when the number of arguments passed to a function is incorrect"""

class KappaTypeError(KappaError):
    """ Raised when the types of arguments passed to a host function are incorrect"""

# --- Bridge errors ---

class KappaTypeMismatch(KappaError):
    """ Raised when a value has no conversion rule, or a hint conflicts with its shape"""

class KappaInvalidKey(KappaError):
    """ Raised when a mapping key is not valid for its target use"""

class KappaScopeError(KappaError):
    """ Raised when scoped contexts are exited out of order or from the wrong thread"""

class KappaStaleHandle(KappaError):
    """ Raised when a handle refers to an object released from the runtime"""
