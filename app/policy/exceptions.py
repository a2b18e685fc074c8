class PolicyError(Exception):
    """Base class for lifecycle and permission failures."""

    code = "policy_error"

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    def default_detail(self):
        return "Request could not be completed."

    def as_dict(self):
        return {"detail": self.detail, "code": self.code}


class AuthorizationError(PolicyError):
    """A role or ownership check refused the action."""

    code = "authorization_error"

    def __init__(self, action, role, detail=None):
        self.action = action
        self.role = role
        super().__init__(detail)

    def default_detail(self):
        return f"Role {self.role} is not allowed to {self.action}."

    def as_dict(self):
        data = super().as_dict()
        data.update({"action": self.action, "role": self.role})
        return data


class InvalidTransitionError(PolicyError):
    """The expense is not in a status the action can start from."""

    code = "invalid_transition"

    def __init__(self, current_status, action, detail=None):
        self.current_status = current_status
        self.action = action
        super().__init__(detail)

    def default_detail(self):
        return f"Cannot {self.action} an expense in {self.current_status} status."

    def as_dict(self):
        data = super().as_dict()
        data.update({"current_status": self.current_status, "action": self.action})
        return data


class ValidationError(PolicyError):
    """Input that must be corrected by the user before any call is made."""

    code = "validation_error"

    def __init__(self, detail, field=None):
        self.field = field
        super().__init__(detail)

    def as_dict(self):
        data = super().as_dict()
        data["field"] = self.field
        return data
