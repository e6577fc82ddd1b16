"""
Typed Exception Hierarchy for the Lease Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every validation clause in the lease state machine maps to exactly one
error kind.  Callers branch on the kind, never on message text, so every
error here has:
  1. A TYPED exception class (catch by type, not message)
  2. A ``code`` attribute (machine-readable, API-safe)
  3. An ``error_number`` attribute (the numeric signal hosts already know)
  4. Structured DATA (lease id, offending value) as attributes

Domain rules raise these exceptions.  The service boundary catches
``LeaseKernelError`` and converts it into a ``LeaseResult`` failure, so
none of them unwinds across the public API.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LeaseKernelError (base)
    |
    +-- AuthorizationError
    |   +-- NotAuthorizedError
    |   +-- InvalidPartyError
    |   +-- IntegrationNotVerifiedError
    |
    +-- GovernanceError
    |   +-- AuthorityNotSetError
    |   +-- AuthorityAlreadySetError
    |   +-- InvalidParameterError
    |
    +-- LeaseTermsError
    |   +-- InvalidDurationError
    |   +-- InvalidRentError
    |   +-- InvalidDepositError
    |   +-- InvalidGracePeriodError
    |   +-- InvalidStartTimeError
    |   +-- InvalidPenaltyRateError
    |   +-- InvalidMaxRenewsError
    |   +-- InvalidLeaseTypeError
    |   +-- InvalidTerminationFeeError
    |   +-- InvalidRenewalThresholdError
    |   +-- InvalidLocationError
    |   +-- InvalidCurrencyError
    |
    +-- LeaseStateError
    |   +-- InvalidStateError
    |   +-- UpdateNotAllowedError
    |   +-- InvalidStatusError
    |   +-- LeaseExpiredError
    |   +-- DisputeAlreadyFiledError
    |
    +-- RegistryError
        +-- LeaseNotFoundError
        +-- MaxLeasesExceededError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                       | No.  | When Raised
---------------------------|------|--------------------------------------------
NOT_AUTHORIZED             | 100  | Caller lacks the role; sentinel address given
INVALID_DURATION           | 101  | Duration outside (0, 3650]
INVALID_RENT               | 102  | Rent not positive
INVALID_DEPOSIT            | 103  | Deposit negative
INVALID_GRACE_PERIOD       | 104  | Grace period above 30
INVALID_STATE              | 105  | Lease not in the state the operation needs
LEASE_NOT_FOUND            | 107  | No lease with that id
INVALID_START_TIME         | 108  | Start in the past; activation too early;
                           |      | payment time not strictly increasing
AUTHORITY_NOT_SET          | 109  | Governance authority not recorded yet
INVALID_PENALTY_RATE       | 110  | Penalty rate above 100
INVALID_MAX_RENEWS         | 111  | Max renews above 10; renewal cap reached
UPDATE_NOT_ALLOWED         | 112  | Amendment after activation
INVALID_PARAMETER          | 113  | Negative creation fee
MAX_LEASES_EXCEEDED        | 114  | Registry at capacity
INVALID_LEASE_TYPE         | 115  | Unknown lease type
INVALID_TERMINATION_FEE    | 116  | Termination fee negative
INVALID_RENEWAL_THRESHOLD  | 117  | Threshold outside (0, 100]; renewal too early
INVALID_LOCATION           | 118  | Location empty or longer than 100
INVALID_CURRENCY           | 119  | Unknown currency tag
INVALID_STATUS             | 120  | Dispute outcome is not a resolution state
INTEGRATION_NOT_VERIFIED   | 121  | Caller is not the escrow/verifier address
INVALID_PARTY              | 122  | Creator is the landlord or the tenant
LEASE_EXPIRED              | 123  | End requested before nominal end;
                           |      | dispute filed after the grace period
DISPUTE_ALREADY_FILED      | 124  | Dispute flag already set
AUTHORITY_ALREADY_SET      | 125  | Authority is write-once

LEASE_EXPIRED deliberately covers both the "not yet reached" signal of
end_lease and the "grace period passed" signal of file_dispute.
"""


class LeaseKernelError(Exception):
    """
    Base exception for all lease kernel errors.

    All subclasses must define ``code`` and ``error_number`` class
    attributes for machine-readable identification.
    """

    code: str = "LEASE_KERNEL_ERROR"
    error_number: int = 0


# Authorization


class AuthorizationError(LeaseKernelError):
    """Base exception for caller-identity failures."""

    code: str = "AUTHORIZATION_ERROR"


class NotAuthorizedError(AuthorizationError):
    """Caller is not the party the operation requires."""

    code: str = "NOT_AUTHORIZED"
    error_number: int = 100

    def __init__(self, caller: str, required_role: str):
        self.caller = caller
        self.required_role = required_role
        super().__init__(f"Caller {caller} is not the {required_role}")


class InvalidPartyError(AuthorizationError):
    """The creator of a lease is one of its parties."""

    code: str = "INVALID_PARTY"
    error_number: int = 122

    def __init__(self, caller: str):
        self.caller = caller
        super().__init__(
            f"Caller {caller} cannot create a lease it is a party to"
        )


class IntegrationNotVerifiedError(AuthorizationError):
    """Caller is not the configured integration collaborator."""

    code: str = "INTEGRATION_NOT_VERIFIED"
    error_number: int = 121

    def __init__(self, caller: str, collaborator: str):
        self.caller = caller
        self.collaborator = collaborator
        super().__init__(
            f"Caller {caller} is not the configured {collaborator} address"
        )


# Governance


class GovernanceError(LeaseKernelError):
    """Base exception for governance configuration errors."""

    code: str = "GOVERNANCE_ERROR"


class AuthorityNotSetError(GovernanceError):
    """No governance authority has been recorded yet."""

    code: str = "AUTHORITY_NOT_SET"
    error_number: int = 109

    def __init__(self):
        super().__init__("Governance authority is not set")


class AuthorityAlreadySetError(GovernanceError):
    """The governance authority is write-once."""

    code: str = "AUTHORITY_ALREADY_SET"
    error_number: int = 125

    def __init__(self, authority: str):
        self.authority = authority
        super().__init__(f"Governance authority already set to {authority}")


class InvalidParameterError(GovernanceError):
    """A governance parameter is out of range."""

    code: str = "INVALID_PARAMETER"
    error_number: int = 113

    def __init__(self, parameter: str, value: object):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid value for {parameter}: {value!r}")


# Lease terms


class LeaseTermsError(LeaseKernelError):
    """
    Base exception for out-of-range lease terms.

    Every subclass records the field name and the rejected value.
    """

    code: str = "LEASE_TERMS_ERROR"
    field_name: str = ""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid {self.field_name}: {value!r}")


class InvalidDurationError(LeaseTermsError):
    code: str = "INVALID_DURATION"
    error_number: int = 101
    field_name: str = "duration"


class InvalidRentError(LeaseTermsError):
    code: str = "INVALID_RENT"
    error_number: int = 102
    field_name: str = "rent_amount"


class InvalidDepositError(LeaseTermsError):
    code: str = "INVALID_DEPOSIT"
    error_number: int = 103
    field_name: str = "deposit_amount"


class InvalidGracePeriodError(LeaseTermsError):
    code: str = "INVALID_GRACE_PERIOD"
    error_number: int = 104
    field_name: str = "grace_period"


class InvalidStartTimeError(LeaseTermsError):
    """
    A logical timestamp is out of order.

    Raised for a start time in the past, an activation before the start
    time, and a payment time that does not strictly increase.
    """

    code: str = "INVALID_START_TIME"
    error_number: int = 108
    field_name: str = "start_time"


class InvalidPenaltyRateError(LeaseTermsError):
    code: str = "INVALID_PENALTY_RATE"
    error_number: int = 110
    field_name: str = "penalty_rate"


class InvalidMaxRenewsError(LeaseTermsError):
    """Max renews above the cap, or the lease has used all its renewals."""

    code: str = "INVALID_MAX_RENEWS"
    error_number: int = 111
    field_name: str = "max_renews"


class InvalidLeaseTypeError(LeaseTermsError):
    code: str = "INVALID_LEASE_TYPE"
    error_number: int = 115
    field_name: str = "lease_type"


class InvalidTerminationFeeError(LeaseTermsError):
    code: str = "INVALID_TERMINATION_FEE"
    error_number: int = 116
    field_name: str = "termination_fee"


class InvalidRenewalThresholdError(LeaseTermsError):
    """Threshold out of range, or renewal requested too far from expiry."""

    code: str = "INVALID_RENEWAL_THRESHOLD"
    error_number: int = 117
    field_name: str = "renewal_threshold"


class InvalidLocationError(LeaseTermsError):
    code: str = "INVALID_LOCATION"
    error_number: int = 118
    field_name: str = "location"


class InvalidCurrencyError(LeaseTermsError):
    code: str = "INVALID_CURRENCY"
    error_number: int = 119
    field_name: str = "currency"


# Lease state


class LeaseStateError(LeaseKernelError):
    """Base exception for lifecycle violations."""

    code: str = "LEASE_STATE_ERROR"


class InvalidStateError(LeaseStateError):
    """The lease is not in the state the operation requires."""

    code: str = "INVALID_STATE"
    error_number: int = 105

    def __init__(self, lease_id: int, state: str, required: str):
        self.lease_id = lease_id
        self.state = state
        self.required = required
        super().__init__(
            f"Lease {lease_id} is {state}, operation requires {required}"
        )


class UpdateNotAllowedError(LeaseStateError):
    """Amendments are only allowed before activation."""

    code: str = "UPDATE_NOT_ALLOWED"
    error_number: int = 112

    def __init__(self, lease_id: int, state: str):
        self.lease_id = lease_id
        self.state = state
        super().__init__(f"Lease {lease_id} is {state}, amendments closed")


class InvalidStatusError(LeaseStateError):
    """A dispute outcome that is not a resolution state."""

    code: str = "INVALID_STATUS"
    error_number: int = 120

    def __init__(self, outcome: str):
        self.outcome = outcome
        super().__init__(f"Invalid dispute outcome: {outcome!r}")


class LeaseExpiredError(LeaseStateError):
    """
    The operation is outside its time window.

    end_lease raises it before the nominal end; file_dispute raises it
    after the grace period.
    """

    code: str = "LEASE_EXPIRED"
    error_number: int = 123

    def __init__(self, lease_id: int, now: int, boundary: int):
        self.lease_id = lease_id
        self.now = now
        self.boundary = boundary
        super().__init__(
            f"Lease {lease_id}: time {now} is outside the window bounded by {boundary}"
        )


class DisputeAlreadyFiledError(LeaseStateError):
    """A lease accepts at most one dispute."""

    code: str = "DISPUTE_ALREADY_FILED"
    error_number: int = 124

    def __init__(self, lease_id: int):
        self.lease_id = lease_id
        super().__init__(f"Dispute already filed for lease {lease_id}")


# Registry


class RegistryError(LeaseKernelError):
    """Base exception for registry store errors."""

    code: str = "REGISTRY_ERROR"


class LeaseNotFoundError(RegistryError):
    """Lease with given id was not found."""

    code: str = "LEASE_NOT_FOUND"
    error_number: int = 107

    def __init__(self, lease_id: int):
        self.lease_id = lease_id
        super().__init__(f"Lease not found: {lease_id}")


class MaxLeasesExceededError(RegistryError):
    """The registry is at capacity."""

    code: str = "MAX_LEASES_EXCEEDED"
    error_number: int = 114

    def __init__(self, max_leases: int):
        self.max_leases = max_leases
        super().__init__(f"Registry is at capacity ({max_leases} leases)")
