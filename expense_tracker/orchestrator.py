"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
flows the presentation layer calls:
1. Expenses (load → submit → delete → aggregate for a chart)
2. Authentication (signup → login)

DESIGN DECISION: The orchestrator is the fail-soft boundary.
- Repositories and the credential store raise typed exceptions
- Flows catch them, audit them, and return a message to display
- A single failed mutation never takes the process down

The one exception is startup: if the schema can't be ensured,
create_app_components() raises and the application must not start.

There is no cached expense list here. Every write returns a result and
the caller asks for a fresh load.
"""

from typing import Optional, Union
from uuid import UUID

from expense_tracker.aggregation import (
    AggregationView,
    MalformedDateError,
    aggregate,
)
from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import Expense
from expense_tracker.models.result import OperationResult
from expense_tracker.models.user import UserIdentity
from expense_tracker.services.auth import (
    CredentialHashingError,
    CredentialStorageError,
    CredentialStore,
    PasswordHasher,
)
from expense_tracker.services.storage import (
    DuplicateError,
    ExpenseStorageInterface,
    SQLiteClient,
    SQLiteExpenseStorage,
    SQLiteUserStorage,
    StorageError,
    ensure_schema,
)
from expense_tracker.validation import ExpenseValidator, SignupValidator


USERNAME_TAKEN_MESSAGE = "Username already exists"
SIGNUP_SUCCESS_MESSAGE = "User successfully registered!"


class ExpenseFlow:
    """
    Orchestrates expense entry, deletion and summaries.

    Flow:
    1. Load → list everything from the store
    2. Submit → validate form fields, insert
    3. Delete → remove by id
    4. Aggregate → reload, then compute category/monthly/yearly totals

    After 2 or 3 the caller reloads; nothing here mutates a cached list.
    """

    def __init__(
        self,
        expense_storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        strict_dates: Optional[bool] = None,
    ):
        self._storage = expense_storage
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._strict_dates = (
            strict_dates
            if strict_dates is not None
            else get_settings().app.strict_date_parsing
        )
        self._last_warning: Optional[str] = None

    @property
    def last_warning(self) -> Optional[str]:
        """Warning from the most recent load or aggregation, if it failed."""
        return self._last_warning

    def load_expenses(self) -> list[Expense]:
        """
        Load all expenses.

        Returns an empty list (and sets last_warning) if the store fails.
        """
        self._last_warning = None
        try:
            return self._storage.list()
        except StorageError as e:
            self._audit_logger.log_store_error("load_expenses", str(e))
            self._last_warning = "Failed to load expenses"
            return []

    def submit_expense(
        self,
        date: str,
        amount: Union[str, float],
        category: str,
        description: str = "",
        payment_method: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """
        Validate and persist one expense.

        On success the caller clears its input fields and reloads.
        """
        correlation_id = correlation_id or create_correlation_id()

        expense, validation = self._validator.validate(
            date=date,
            amount=amount,
            category=category,
            description=description,
            payment_method=payment_method,
        )
        if expense is None:
            reason = validation.first_error or "Invalid expense"
            self._audit_logger.log_expense_rejected(reason, correlation_id)
            return OperationResult(success=False, message=reason)

        try:
            expense_id = self._storage.add(expense)
        except StorageError as e:
            self._audit_logger.log_store_error("add_expense", str(e), correlation_id)
            return OperationResult(
                success=False,
                message="Failed to add expense, please try again",
            )

        self._audit_logger.log_expense_added(
            expense_id=expense_id,
            category=expense.category,
            amount=expense.amount,
            correlation_id=correlation_id,
        )
        return OperationResult(
            success=True,
            message="Expense added",
            entity_id=expense_id,
        )

    def delete_expense(
        self,
        expense_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Delete one expense. Deleting an unknown id still succeeds."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            self._storage.delete(expense_id)
        except StorageError as e:
            self._audit_logger.log_store_error("delete_expense", str(e), correlation_id)
            return OperationResult(
                success=False,
                message="Failed to delete expense, please try again",
                entity_id=expense_id,
            )

        self._audit_logger.log_expense_deleted(expense_id, correlation_id)
        return OperationResult(
            success=True,
            message="Expense deleted",
            entity_id=expense_id,
        )

    def aggregated_view(
        self,
        view: Union[AggregationView, str],
    ) -> dict[str, float]:
        """
        Fresh totals for a chart.

        Reloads before every known view. Returns an empty mapping (and sets
        last_warning) if the view name is unknown, loading fails or, in
        strict mode, a date is malformed.
        """
        try:
            view = AggregationView(view)
        except ValueError:
            self._last_warning = f"Unknown summary: {view}"
            return {}

        expenses = self.load_expenses()
        if self._last_warning:
            return {}

        try:
            return aggregate(expenses, view, strict=self._strict_dates)
        except MalformedDateError as e:
            self._audit_logger.log_store_error(f"aggregate_{view.value}", str(e))
            self._last_warning = (
                f"Expense {e.expense_id} has an invalid date: {e.raw_date}"
            )
            return {}


class AuthFlow:
    """
    Orchestrates signup and login.

    Signup order:
    1. Both fields present
    2. Username not taken (pre-check against the store)
    3. Password meets the policy
    4. Hash and insert

    Login never says which half of the credentials was wrong.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        validator: Optional[SignupValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._credentials = credential_store
        self._validator = validator or SignupValidator()
        self._audit_logger = audit_logger or AuditLogger()

    def login(
        self,
        username: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[UserIdentity]:
        """
        Attempt a login.

        Returns the identity on success, None otherwise (including when
        the store is unavailable).
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            identity = self._credentials.authenticate(username, password)
        except StorageError as e:
            self._audit_logger.log_store_error("login", str(e), correlation_id)
            return None

        self._audit_logger.log_login(
            username=username,
            user_id=identity.id if identity else None,
            correlation_id=correlation_id,
        )
        return identity

    def signup(
        self,
        username: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> OperationResult:
        """Register a new user, returning the reason on failure."""
        correlation_id = correlation_id or create_correlation_id()

        validation = self._validator.validate(username, password)
        missing = [i for i in validation.issues if i.issue_type == "missing"]
        if missing:
            return self._reject(username, missing[0].message, correlation_id)

        try:
            unique = self._credentials.is_username_unique(username)
        except StorageError as e:
            self._audit_logger.log_store_error("signup_precheck", str(e), correlation_id)
            return OperationResult(
                success=False,
                message="Failed to check username uniqueness",
            )
        if not unique:
            return self._reject(username, USERNAME_TAKEN_MESSAGE, correlation_id)

        if validation.has_errors:
            return self._reject(username, validation.first_error, correlation_id)

        try:
            user_id = self._credentials.add_user(username, password)
        except CredentialStorageError as e:
            if isinstance(e.cause, DuplicateError):
                # Taken between the pre-check and the insert
                return self._reject(username, USERNAME_TAKEN_MESSAGE, correlation_id)
            self._audit_logger.log_store_error("signup", str(e), correlation_id)
            return OperationResult(
                success=False,
                message="Failed to register: storage unavailable, try again later",
            )
        except CredentialHashingError as e:
            self._audit_logger.log_hashing_error("signup", str(e), correlation_id)
            return OperationResult(
                success=False,
                message="Failed to register: internal error",
            )

        self._audit_logger.log_user_registered(user_id, username, correlation_id)
        return OperationResult(
            success=True,
            message=SIGNUP_SUCCESS_MESSAGE,
            entity_id=user_id,
        )

    def _reject(
        self,
        username: str,
        reason: str,
        correlation_id: UUID,
    ) -> OperationResult:
        self._audit_logger.log_signup_rejected(username, reason, correlation_id)
        return OperationResult(success=False, message=reason)


def create_app_components(
    settings: Optional[Settings] = None,
    db_path: Optional[str] = None,
    bcrypt_rounds: Optional[int] = None,
) -> tuple[ExpenseFlow, AuthFlow, SQLiteClient]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        db_path: Override the configured database path
        bcrypt_rounds: Override the configured bcrypt work factor

    Returns:
        (expense_flow, auth_flow, sqlite_client)

    Raises:
        SchemaError: If the database can't be prepared. Fatal.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    security_settings = settings.security

    client = SQLiteClient(
        db_path=db_path or storage_settings.path,
        timeout=storage_settings.timeout_seconds,
    )
    ensure_schema(client)

    audit_logger = AuditLogger()
    audit_logger.log_schema_ensured(client.db_path)

    hasher = PasswordHasher(
        rounds=bcrypt_rounds if bcrypt_rounds is not None else security_settings.bcrypt_rounds
    )
    credential_store = CredentialStore(SQLiteUserStorage(client), hasher)

    expense_flow = ExpenseFlow(
        expense_storage=SQLiteExpenseStorage(client),
        audit_logger=audit_logger,
        strict_dates=settings.app.strict_date_parsing,
    )
    auth_flow = AuthFlow(
        credential_store=credential_store,
        validator=SignupValidator(min_length=security_settings.password_min_length),
        audit_logger=audit_logger,
    )

    return expense_flow, auth_flow, client
