"""
Tests for the expense and auth flows

Integration tests run against a real SQLite file built by
create_app_components(); failure paths use small in-memory fakes.
"""

import pytest

from expense_tracker.aggregation import AggregationView
from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventType
from expense_tracker.orchestrator import (
    SIGNUP_SUCCESS_MESSAGE,
    USERNAME_TAKEN_MESSAGE,
    AuthFlow,
    ExpenseFlow,
    create_app_components,
)
from expense_tracker.services.auth import CredentialStore, PasswordHasher
from expense_tracker.services.storage import (
    DuplicateError,
    ExpenseStorageInterface,
    SchemaError,
    StorageError,
    UserStorageInterface,
)


TEST_BCRYPT_ROUNDS = 4


class FailingExpenseStorage(ExpenseStorageInterface):
    """Every call fails like a locked or missing database."""

    def add(self, expense):
        raise StorageError("disk I/O error")

    def list(self):
        raise StorageError("disk I/O error")

    def delete(self, expense_id):
        raise StorageError("disk I/O error")

    def count(self):
        raise StorageError("disk I/O error")


class FakeUserStorage(UserStorageInterface):
    """User storage whose failures are chosen per test."""

    def __init__(self, exists_error=None, insert_error=None, lookup_error=None):
        self._exists_error = exists_error
        self._insert_error = insert_error
        self._lookup_error = lookup_error

    def insert(self, username, password_hash):
        if self._insert_error:
            raise self._insert_error
        return 1

    def get_by_username(self, username):
        if self._lookup_error:
            raise self._lookup_error
        return None

    def exists(self, username):
        if self._exists_error:
            raise self._exists_error
        return False

    def delete(self, username):
        pass


@pytest.fixture
def components(db_path):
    expense_flow, auth_flow, client = create_app_components(
        db_path=db_path,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
    )
    yield expense_flow, auth_flow
    client.close()


@pytest.fixture
def expense_flow(components):
    return components[0]


@pytest.fixture
def auth_flow(components):
    return components[1]


def fake_auth_flow(audit_logger=None, **failures) -> AuthFlow:
    store = CredentialStore(
        FakeUserStorage(**failures),
        PasswordHasher(rounds=TEST_BCRYPT_ROUNDS),
    )
    return AuthFlow(store, audit_logger=audit_logger)


class TestStartup:
    """Tests for create_app_components."""

    def test_builds_working_components(self, components):
        """Test that the factory returns ready-to-use flows."""
        expense_flow, auth_flow = components
        assert isinstance(expense_flow, ExpenseFlow)
        assert isinstance(auth_flow, AuthFlow)
        assert expense_flow.load_expenses() == []

    def test_unreachable_store_refuses_to_start(self, tmp_path):
        """Test that a schema failure is raised, not swallowed."""
        with pytest.raises(SchemaError):
            create_app_components(
                db_path=str(tmp_path / "missing" / "expenses.db"),
                bcrypt_rounds=TEST_BCRYPT_ROUNDS,
            )

    def test_data_survives_restart(self, db_path):
        """Test that a second startup sees expenses and users from the first."""
        expense_flow, auth_flow, client = create_app_components(
            db_path=db_path, bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        )
        expense_flow.submit_expense("2023-11-07", "3.50", "Food", "Coffee", "Cash")
        auth_flow.signup("alice", "p4ss!")
        client.close()

        expense_flow, auth_flow, client = create_app_components(
            db_path=db_path, bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        )
        assert [e.description for e in expense_flow.load_expenses()] == ["Coffee"]
        assert auth_flow.login("alice", "p4ss!") is not None
        client.close()


class TestSignup:
    """Tests for AuthFlow.signup."""

    def test_success(self, auth_flow):
        """Test a clean registration."""
        result = auth_flow.signup("alice", "p4ss!")
        assert result.success is True
        assert result.message == SIGNUP_SUCCESS_MESSAGE
        assert result.entity_id is not None

    def test_duplicate_username(self, auth_flow):
        """Test that a taken name is rejected before hashing."""
        auth_flow.signup("alice", "p4ss!")
        result = auth_flow.signup("alice", "0ther!")
        assert result.success is False
        assert result.message == USERNAME_TAKEN_MESSAGE

    def test_duplicate_is_reported_before_weak_password(self, auth_flow):
        """Test the check order: uniqueness, then policy."""
        auth_flow.signup("alice", "p4ss!")
        assert auth_flow.signup("alice", "weak").message == USERNAME_TAKEN_MESSAGE

    def test_weak_password(self, auth_flow):
        """Test that the policy message is returned."""
        result = auth_flow.signup("alice", "password")
        assert result.success is False
        assert "include a number and a symbol" in result.message
        assert auth_flow.login("alice", "password") is None

    @pytest.mark.parametrize("username,password", [("", "p4ss!"), ("alice", "")])
    def test_empty_fields(self, auth_flow, username, password):
        """Test that empty fields never reach the store."""
        result = auth_flow.signup(username, password)
        assert result.success is False
        assert result.message == "Username and password cannot be empty"

    def test_precheck_storage_failure(self):
        """Test that a failing uniqueness check is reported as such."""
        flow = fake_auth_flow(exists_error=StorageError("database is locked"))
        result = flow.signup("alice", "p4ss!")
        assert result.success is False
        assert result.message == "Failed to check username uniqueness"

    def test_insert_race_reports_duplicate(self):
        """Test that a duplicate at insert time still says the name is taken."""
        flow = fake_auth_flow(insert_error=DuplicateError("UNIQUE constraint failed"))
        assert flow.signup("alice", "p4ss!").message == USERNAME_TAKEN_MESSAGE

    def test_insert_storage_failure(self):
        """Test that a storage failure at insert asks the user to retry."""
        audit = AuditLogger()
        flow = fake_auth_flow(audit_logger=audit, insert_error=StorageError("disk full"))

        result = flow.signup("alice", "p4ss!")

        assert result.success is False
        assert result.message == "Failed to register: storage unavailable, try again later"
        assert audit.recent_events(1)[0].event_type == AuditEventType.STORE_ERROR

    def test_hashing_failure(self, user_storage):
        """Test that a bcrypt failure is an internal error and stores nothing."""
        audit = AuditLogger()
        flow = AuthFlow(
            CredentialStore(user_storage, PasswordHasher(rounds=3)),
            audit_logger=audit,
        )

        result = flow.signup("alice", "p4ss!")

        assert result.success is False
        assert result.message == "Failed to register: internal error"
        assert user_storage.exists("alice") is False
        assert audit.recent_events(1)[0].event_type == AuditEventType.HASHING_ERROR


class TestLogin:
    """Tests for AuthFlow.login."""

    def test_success(self, auth_flow):
        """Test that a registered user gets an identity back."""
        user_id = auth_flow.signup("alice", "p4ss!").entity_id
        identity = auth_flow.login("alice", "p4ss!")
        assert identity.id == user_id
        assert identity.username == "alice"

    def test_failure(self, auth_flow):
        """Test wrong password and unknown user."""
        auth_flow.signup("alice", "p4ss!")
        assert auth_flow.login("alice", "nope1!") is None
        assert auth_flow.login("bob", "p4ss!") is None

    def test_failed_login_is_audited_without_password(self):
        """Test that the audit trail records the username only."""
        audit = AuditLogger()
        flow = fake_auth_flow(audit_logger=audit)

        flow.login("alice", "s3cret!")

        event = audit.recent_events(1)[0]
        assert event.event_type == AuditEventType.LOGIN_FAILED
        assert "s3cret!" not in str(event.to_log_dict())

    def test_store_failure_is_a_failed_login(self):
        """Test that an unavailable store doesn't raise out of login."""
        flow = fake_auth_flow(lookup_error=StorageError("database is locked"))
        assert flow.login("alice", "p4ss!") is None


class TestExpenseFlow:
    """Tests for ExpenseFlow."""

    def test_submit_then_load(self, expense_flow):
        """Test that a submitted expense shows up on the next load."""
        result = expense_flow.submit_expense(
            date="2023-11-07",
            amount="3.50",
            category="Food",
            description="Coffee",
            payment_method="Cash",
        )
        assert result.success is True
        assert result.message == "Expense added"

        expenses = expense_flow.load_expenses()
        assert [(e.id, e.amount) for e in expenses] == [(result.entity_id, 3.5)]

    def test_invalid_submission_is_not_stored(self, expense_flow):
        """Test that a validation failure returns the reason and stores nothing."""
        result = expense_flow.submit_expense("2023-11-07", "abc", "Food")
        assert result.success is False
        assert result.message == "Amount is not a number: abc"
        assert expense_flow.load_expenses() == []

    def test_delete(self, expense_flow):
        """Test that a deleted expense disappears from the next load."""
        expense_id = expense_flow.submit_expense("2023-11-07", "5", "Food").entity_id

        result = expense_flow.delete_expense(expense_id)

        assert result.success is True
        assert expense_flow.load_expenses() == []

    def test_aggregated_views_reload(self, expense_flow):
        """Test that every view reflects writes made just before it."""
        expense_flow.submit_expense("2022-06-01", "10", "Food")
        assert expense_flow.aggregated_view(AggregationView.YEARLY) == {"2022": 10.0}

        expense_flow.submit_expense("2023-01-01", "5", "Travel")
        assert expense_flow.aggregated_view("yearly") == {"2022": 10.0, "2023": 5.0}
        assert expense_flow.aggregated_view("monthly") == {"2022-06": 10.0, "2023-01": 5.0}
        assert expense_flow.aggregated_view("category") == {"Food": 10.0, "Travel": 5.0}

    def test_views_sum_to_stored_total(self, expense_flow):
        """Test that totals over persisted data match what was entered."""
        amounts = ["12.25", "0", "7.5", "100"]
        for i, amount in enumerate(amounts):
            expense_flow.submit_expense(f"2023-0{i + 1}-15", amount, "Food")

        expected = sum(float(a) for a in amounts)
        for view in AggregationView:
            assert sum(expense_flow.aggregated_view(view).values()) == pytest.approx(expected)

    def test_malformed_date_skipped_by_default(self, expense_flow):
        """Test that a free-text date is stored but left out of date views."""
        expense_flow.submit_expense("2023-11-07", "5", "Food")
        expense_flow.submit_expense("last tuesday", "7", "Food")

        assert expense_flow.aggregated_view("monthly") == {"2023-11": 5.0}
        assert expense_flow.aggregated_view("category") == {"Food": 12.0}
        assert expense_flow.last_warning is None

    def test_malformed_date_in_strict_mode(self, expense_storage):
        """Test that strict mode returns nothing and names the expense."""
        flow = ExpenseFlow(expense_storage, strict_dates=True)
        flow.submit_expense("2023-11-07", "5", "Food")
        bad_id = flow.submit_expense("last tuesday", "7", "Food").entity_id

        assert flow.aggregated_view("monthly") == {}
        assert flow.last_warning == f"Expense {bad_id} has an invalid date: last tuesday"

    def test_unknown_view_is_a_warning(self, expense_flow):
        """Test that an unrecognised summary name returns nothing instead of raising."""
        expense_flow.submit_expense("2023-11-07", "5", "Food")

        assert expense_flow.aggregated_view("weekly") == {}
        assert expense_flow.last_warning == "Unknown summary: weekly"

        assert expense_flow.aggregated_view("category") == {"Food": 5.0}
        assert expense_flow.last_warning is None

    def test_rows_written_elsewhere_are_shown(self, client, expense_storage):
        """Test that a stored negative amount is listed, totalled and deletable."""
        flow = ExpenseFlow(expense_storage)
        flow.submit_expense("2023-01-05", "10", "Food")
        refund_id = client.execute(
            "INSERT INTO expenses (date, amount, category) VALUES (?, ?, ?)",
            ("2023-01-06", -4.0, "Food"),
        ).lastrowid

        assert len(flow.load_expenses()) == expense_storage.count() == 2
        assert flow.last_warning is None
        assert flow.aggregated_view("monthly") == {"2023-01": 6.0}

        assert flow.delete_expense(refund_id).success is True
        assert flow.aggregated_view("category") == {"Food": 10.0}


class TestExpenseFlowFailSoft:
    """Tests that store failures become messages, not exceptions."""

    @pytest.fixture
    def flow(self):
        return ExpenseFlow(FailingExpenseStorage(), strict_dates=False)

    def test_load_failure(self, flow):
        """Test that a failed load is an empty list plus a warning."""
        assert flow.load_expenses() == []
        assert flow.last_warning == "Failed to load expenses"

    def test_submit_failure(self, flow):
        """Test that a failed insert is a retry message."""
        result = flow.submit_expense("2023-11-07", "5", "Food")
        assert result.success is False
        assert result.message == "Failed to add expense, please try again"

    def test_delete_failure(self, flow):
        """Test that a failed delete is a retry message."""
        result = flow.delete_expense(3)
        assert result.success is False
        assert result.message == "Failed to delete expense, please try again"

    def test_aggregation_on_failed_load(self, flow):
        """Test that charts get an empty mapping when the load fails."""
        assert flow.aggregated_view("category") == {}
        assert flow.last_warning == "Failed to load expenses"
