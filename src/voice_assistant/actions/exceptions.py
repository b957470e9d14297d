"""Custom exceptions for action plan parsing and skill dispatch."""


class ActionPlanError(Exception):
    """Base exception for action plan parsing errors."""

    pass


class InvalidJSONError(ActionPlanError):
    """Exception raised when the model output contains no JSON object."""

    def __init__(self, message: str = "Invalid JSON response from language model") -> None:
        super().__init__(message)


class MissingTypeError(ActionPlanError):
    """Exception raised when the action plan has no string 'type' field."""

    def __init__(self, message: str = "Missing 'type' field in action plan") -> None:
        super().__init__(message)


class UnknownTypeError(ActionPlanError):
    """Exception raised for an action plan type other than respond or call_skills."""

    def __init__(self, plan_type: str) -> None:
        self.plan_type = plan_type
        super().__init__(f"Unknown action type: {plan_type}")


class MissingFieldError(ActionPlanError):
    """Exception raised when a required field is absent or has the wrong type."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Missing required field: {field}")


class InvalidFieldError(ActionPlanError):
    """Exception raised when a field is present but malformed."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid field '{field}': {reason}")


class SkillError(Exception):
    """Base exception for skill errors."""

    pass


class SkillNotFoundError(SkillError):
    """Exception raised when no skill is registered under an id."""

    pass


class SkillDisabledError(SkillError):
    """Exception raised when a registered skill is disabled."""

    pass


class InvalidArgumentsError(SkillError):
    """Exception raised when skill arguments fail validation."""

    pass


class SkillExecutionError(SkillError):
    """Exception raised when a skill fails while executing."""

    pass


class SkillTimeoutError(SkillError):
    """Exception raised when a skill exceeds its time limit."""

    pass
