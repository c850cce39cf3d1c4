# barledger/utils/errors.py
class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided config (paths, symbols, dates).
    Should NOT print traceback.
    """
