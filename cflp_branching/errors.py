""" Exceptions raised by the tiered CFLP solver. """

class CFLPError(Exception):
    """ Base class for all solver errors. """

class InstanceError(CFLPError, ValueError):
    """ Instance data is malformed (shape mismatch, negative values, ...). """

class CostOverflowError(CFLPError, ArithmeticError):
    """ A facility cost left the representable range or no level can hold the demand. """

class AssignmentError(CFLPError, IndexError):
    """ An assignment refers to a facility that does not exist. """
