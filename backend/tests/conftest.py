"""Pytest configuration and fixtures."""
import asyncio
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from app.database import Base, get_db
from app.models.user import User, UserRole
from app.models.agent import Agent
from app.models.agent_team import AgentTeam
from app.auth.security import hash_password, create_access_token
from app.services.exceptions import PaymentGatewayError
from app.services.payment_gateway import PaymentIntent, PAYMENT_CANCELED, get_payment_gateway
from main import app


class FakePaymentGateway:
    """
    In-memory stand-in for :class:`StripePaymentGateway`.

    Intents are numbered ``pi_1``, ``pi_2``... with secrets ``sec_1``, ``sec_2``...
    and start out as ``requires_payment_method``. Add an operation name to
    ``fail_on`` to make that call raise ``PaymentGatewayError``.
    """

    def __init__(self):
        self.intents: dict[str, PaymentIntent] = {}
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self._intent_seq = 0
        self._customer_seq = 0

    def _record(self, operation: str, *args):
        self.calls.append((operation, args))
        if operation in self.fail_on:
            raise PaymentGatewayError(operation)

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def set_status(self, payment_intent_id: str, status: str):
        self.intents[payment_intent_id].status = status

    async def create_payment_intent(self, amount, currency, metadata, customer=None):
        # Yield so concurrent requests genuinely interleave here
        await asyncio.sleep(0)
        self._record("create_payment_intent", amount, currency, metadata, customer)
        self._intent_seq += 1
        intent = PaymentIntent(
            id=f"pi_{self._intent_seq}",
            status="requires_payment_method",
            client_secret=f"sec_{self._intent_seq}",
            amount=amount,
            currency=currency,
            metadata=dict(metadata),
        )
        self.intents[intent.id] = intent
        return intent

    async def retrieve_payment_intent(self, payment_intent_id):
        await asyncio.sleep(0)
        self._record("retrieve_payment_intent", payment_intent_id)
        if payment_intent_id not in self.intents:
            raise PaymentGatewayError("retrieve_payment_intent")
        return self.intents[payment_intent_id]

    async def cancel_payment_intent(self, payment_intent_id):
        self._record("cancel_payment_intent", payment_intent_id)
        intent = self.intents[payment_intent_id]
        intent.status = PAYMENT_CANCELED
        return intent

    async def create_customer(self, email, name, user_id):
        self._record("create_customer", email, name, user_id)
        self._customer_seq += 1
        return f"cus_{self._customer_seq}"

    async def cancel_subscription(self, stripe_subscription_id):
        self._record("cancel_subscription", stripe_subscription_id)


@pytest.fixture
async def session_factory(tmp_path):
    """File-backed SQLite database so that concurrent requests each get their own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_db(session_factory):
    """Session used by tests to arrange data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
async def client(session_factory, gateway):
    """HTTP client wired to the test database and the fake gateway."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db, uuid, email, role=UserRole.USER, **kwargs):
    user = User(
        uuid=uuid,
        name=email.split("@")[0].title(),
        email=email,
        password_hash=hash_password("TestPass123"),
        status="active",
        user_role=role.value,
        **kwargs
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def test_user(test_db):
    return await _create_user(test_db, "test-user-1", "test@example.com")


@pytest.fixture
async def other_user(test_db):
    return await _create_user(test_db, "other-user-1", "other@example.com")


@pytest.fixture
async def admin_user(test_db):
    return await _create_user(test_db, "admin-user-1", "admin@example.com", role=UserRole.ADMIN)


def _auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.uuid, "email": user.email, "role": user.user_role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(test_user):
    return _auth_headers(test_user)


@pytest.fixture
def other_headers(other_user):
    return _auth_headers(other_user)


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)


@pytest.fixture
async def test_team(test_db):
    team = AgentTeam(
        uuid="team-1",
        name="LexiSuite",
        description="Legal document pipeline",
        category="Legal",
        price=19900,
        workflow={"steps": [
            {"step": 2, "description": "Review clauses", "agent": "Clause Reviewer"},
            {"step": 1, "description": "Ingest documents", "agent": "Intake"},
        ]},
        is_featured=True,
    )
    test_db.add(team)
    await test_db.commit()
    await test_db.refresh(team)
    return team


@pytest.fixture
async def test_agent(test_db):
    agent = Agent(
        uuid="agent-1",
        name="Invoice Processor",
        description="Extracts and validates invoice data",
        price=2999,
        category="Finance",
        features="OCR,Validation",
        is_popular=True,
    )
    test_db.add(agent)
    await test_db.commit()
    await test_db.refresh(agent)
    return agent
