'''
file:       eigenkernel/algebra/eigen/errors.py

Error codes and exceptions raised by the dense eigen-decomposition engine.

Two failure classes reach the caller:
    - malformed input (non-square, empty, non-finite, complex) is rejected
      before any buffer is allocated,
    - an exhausted iteration budget in the QL / QR iterations.

Near-zero pivots inside the Householder and QL steps are compensated locally
and never surface as errors.
'''

from typing import Optional
from enum import Enum, unique

# -----------------------------------------------------------------------------
#! Error codes
# -----------------------------------------------------------------------------

@unique
class EigenErrorMsg(Enum):
    '''
    Enumeration class for eigen-decomposition error messages.
    '''
    INVALID_INPUT       = 201
    NOT_SQUARE          = 202
    EMPTY_MATRIX        = 203
    NON_FINITE          = 204
    CONV_FAILED         = 205
    INVALID_ARGUMENT    = 206

    def __str__(self):
        return self.name.replace('_', ' ').title()

    def __repr__(self):
        return f"<{self.__class__.__name__}.{self.name}: '{str(self)}'>"

# -----------------------------------------------------------------------------
#! Exceptions
# -----------------------------------------------------------------------------

class EigenError(Exception):
    '''
    Base class for exceptions in the eigen module.
    '''
    def __init__(self, code: EigenErrorMsg, message: Optional[str] = None):
        self.code       = code
        self.message    = message if message else str(code)
        super().__init__(self.message)

    def __str__(self):
        return f"[EigenError {self.code.name} ({self.code.value})]: {self.message}"

    def __repr__(self):
        return self.__str__()

class InvalidInputError(EigenError, ValueError):
    '''
    The matrix or a solver argument cannot be decomposed.
    '''
    def __init__(self, message: Optional[str] = None, code: EigenErrorMsg = EigenErrorMsg.INVALID_INPUT):
        super().__init__(code, message)

class NumericalNonConvergenceError(EigenError, RuntimeError):
    '''
    The QL or QR iteration did not deflate an eigenvalue within the budget.

    Attributes:
        index (int):
            Position of the eigenvalue that was being deflated.
        iterations (int):
            Iterations spent on that eigenvalue.
    '''
    def __init__(self, index: int, iterations: int, method: str = 'qr'):
        self.index      = index
        self.iterations = iterations
        self.method     = method
        super().__init__(EigenErrorMsg.CONV_FAILED,
                        f"{method.upper()} iteration did not converge for eigenvalue {index} after {iterations} iterations")

# -----------------------------------------------------------------------------
#! EOF
# -----------------------------------------------------------------------------
