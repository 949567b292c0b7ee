from enum import Enum


class ErrorKind(Enum):
    """Kinds of failure reported while parsing or evaluating a formula."""
    UNKNOWN_IDENTIFIER = 'UnknownIdentifier'
    UNKNOWN_FUNCTION = 'UnknownFunction'
    ARGUMENT_COUNT_MISMATCH = 'ArgumentCountMismatch'
    UNTERMINATED_STRING = 'UnterminatedString'
    UNBALANCED_PARENTHESIS = 'UnbalancedParenthesis'
    UNEXPECTED_COMMA = 'UnexpectedComma'
    UNEXPECTED_OPERAND = 'UnexpectedOperand'
    UNEXPECTED_OPERATOR = 'UnexpectedOperator'
    UNEXPECTED_CHARACTER = 'UnexpectedCharacter'
    TYPE_MISMATCH = 'TypeMismatch'
    EMPTY_INPUT = 'EmptyInput'
    DIVISION_BY_ZERO = 'DivisionByZero'
    NESTING_TOO_DEEP = 'NestingTooDeep'

    def __str__(self) -> str:
        return self.value


class FormulaError(Exception):
    """Exception type used to propagate parse and evaluation failures."""
    def __init__(self, kind: ErrorKind, offset: int, message: str = ''):
        super().__init__(f"{kind} at offset {offset}: {message or kind}")
        self.kind = kind
        self.offset = offset
        self.message = message or str(kind)
