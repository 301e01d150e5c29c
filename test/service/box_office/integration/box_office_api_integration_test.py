"""
HTTP-level tests: routing, session cookie identity, role checks and error mapping.

The container runs against the per-test SQLite database; the payment provider and
the background task runner are replaced with in-process fakes.
"""

from collections.abc import AsyncGenerator, Callable, Generator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

from dependency_injector import providers
from fastapi import FastAPI
import httpx
import pytest

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.service.box_office.app.interface.i_payment_gateway import PaymentDetails, PaymentIntent
from src.service.box_office.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


SESSION_COOKIE = 'reservation_session'


@pytest.fixture
def payment_gateway() -> AsyncMock:
    gateway = AsyncMock()
    gateway.retrieve_payment = AsyncMock(
        side_effect=lambda *, reference: PaymentDetails(
            reference=reference, status='succeeded', amount_in_cents=3000
        )
    )
    gateway.create_payment_intent = AsyncMock(
        side_effect=lambda **kwargs: PaymentIntent(
            id='pi_started',
            client_secret='pi_started_secret_abc',
            status='requires_payment_method',
            amount_in_cents=kwargs['amount_in_cents'],
            currency=kwargs['currency'],
        )
    )
    return gateway


@pytest.fixture
def app(database, payment_gateway) -> Generator[FastAPI, None, None]:
    container.database.override(providers.Object(database))
    container.payment_gateway.override(providers.Object(payment_gateway))
    container.task_runner.override(providers.Object(MagicMock()))
    container.reset_singletons()
    container.wire(modules=WIRE_MODULES)

    yield create_app(title_suffix=' (Test)')

    container.unwire()
    container.reset_override()
    container.reset_singletons()


@pytest.fixture
def browser(app: FastAPI) -> Callable:
    """Each `browser()` is an independent client with its own cookie jar."""

    @asynccontextmanager
    async def _browser(**kwargs) -> AsyncGenerator[httpx.AsyncClient, None]:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url='http://testserver', **kwargs
        ) as client:
            yield client

    return _browser


def _bearer(role: str, user_id: str = 'user-1') -> dict[str, str]:
    token = JwtAuth().encode({'sub': user_id, 'email': f'{role}@studio.test', 'role': role})
    return {'Authorization': f'Bearer {token}'}


@pytest.mark.integration
class TestReservationApi:
    @pytest.mark.asyncio
    async def test_hold_is_bound_to_the_browser_that_made_it(self, browser, seed_show) -> None:
        """
        Given: An anonymous browser holds two seats
        When: Another browser presents the same token to check out or extend
        Then: It is rejected with 403 while the owner can extend
        """
        show = await seed_show(seat_count=2)

        async with browser() as owner, browser() as stranger:
            response = await owner.post(
                '/api/reservations',
                json={
                    'show_id': str(show.show_id),
                    'seat_ids': [str(seat_id) for seat_id in show.show_seat_ids],
                    'email': 'Parent@Example.com',
                },
            )
            assert response.status_code == 201
            assert SESSION_COOKIE in response.cookies
            assert 'httponly' in response.headers['set-cookie'].lower()
            body = response.json()
            assert body['total_amount_in_cents'] == 3000
            assert body['email'] == 'parent@example.com'
            token = body['token']

            stolen = await stranger.post(
                '/api/orders',
                json={
                    'reservation_token': token,
                    'payment_intent_id': 'pi_1',
                    'customer_name': 'Mallory',
                    'customer_email': 'm@example.com',
                },
            )
            assert stolen.status_code == 403

            assert (await stranger.post(f'/api/reservations/{token}/extend')).status_code == 403
            extended = await owner.post(f'/api/reservations/{token}/extend')
            assert extended.status_code == 200
            assert extended.json()['extension_count'] == 1

            # Read is token-only
            assert (await stranger.get(f'/api/reservations/{token}')).status_code == 200

    @pytest.mark.asyncio
    async def test_payment_intent_is_priced_server_side_for_the_owner(
        self, browser, seed_show, payment_gateway
    ) -> None:
        """
        Given: A browser holds two 1500-cent seats
        When: The owner and a stranger ask to start a payment for that hold
        Then: The owner gets a 3000-cent client secret; the stranger gets 403
        """
        show = await seed_show(seat_count=2, price_in_cents=1500)

        async with browser() as owner, browser() as stranger:
            token = (
                await owner.post(
                    '/api/reservations',
                    json={
                        'show_id': str(show.show_id),
                        'seat_ids': [str(seat_id) for seat_id in show.show_seat_ids],
                        'email': 'parent@example.com',
                    },
                )
            ).json()['token']

            refused = await stranger.post(f'/api/reservations/{token}/payment-intent')
            started = await owner.post(
                f'/api/reservations/{token}/payment-intent', json={'idempotency_key': 'tab-1'}
            )

        assert refused.status_code == 403
        assert started.status_code == 201
        body = started.json()
        assert body['payment_intent_id'] == 'pi_started'
        assert body['client_secret'] == 'pi_started_secret_abc'
        assert body['amount_in_cents'] == 3000
        assert body['currency'] == 'usd'
        payment_gateway.create_payment_intent.assert_awaited_once()
        kwargs = payment_gateway.create_payment_intent.await_args.kwargs
        assert kwargs['amount_in_cents'] == 3000
        assert kwargs['idempotency_key'].endswith('-3000-tab-1')

    @pytest.mark.asyncio
    async def test_taken_seats_conflict_and_cancel_frees_them(self, browser, seed_show) -> None:
        show = await seed_show(seat_count=1)
        payload = {
            'show_id': str(show.show_id),
            'seat_ids': [str(show.show_seat_ids[0])],
            'email': 'parent@example.com',
        }

        async with browser() as first, browser() as second:
            token = (await first.post('/api/reservations', json=payload)).json()['token']

            taken = await second.post('/api/reservations', json=payload)
            assert taken.status_code == 409

            canceled = await first.delete(f'/api/reservations/{token}')
            assert canceled.json() == {'canceled': True}
            again = await first.delete(f'/api/reservations/{token}')
            assert again.json() == {'canceled': False}
            assert (await first.get(f'/api/reservations/{token}')).status_code == 410

            assert (await second.post('/api/reservations', json=payload)).status_code == 201

    @pytest.mark.asyncio
    async def test_bad_requests(self, browser, seed_show) -> None:
        show = await seed_show(seat_count=1)

        async with browser() as client:
            empty = await client.post(
                '/api/reservations',
                json={'show_id': str(show.show_id), 'seat_ids': [], 'email': 'parent@example.com'},
            )
            missing_field = await client.post('/api/reservations', json={'seat_ids': []})
            unknown = await client.get('/api/reservations/' + 'f' * 64)

        assert empty.status_code == 400
        assert missing_field.status_code == 400
        assert unknown.status_code == 404


@pytest.mark.integration
class TestOrderApi:
    @pytest.mark.asyncio
    async def test_checkout_lookup_and_staff_views(self, browser, seed_show) -> None:
        show = await seed_show(seat_count=2, price_in_cents=1500)

        async with browser() as client:
            token = (
                await client.post(
                    '/api/reservations',
                    json={
                        'show_id': str(show.show_id),
                        'seat_ids': [str(seat_id) for seat_id in show.show_seat_ids],
                        'email': 'parent@example.com',
                    },
                )
            ).json()['token']

            created = await client.post(
                '/api/orders',
                json={
                    'reservation_token': token,
                    'payment_intent_id': 'pi_paid',
                    'customer_name': 'Jamie Rivera',
                    'customer_email': 'Parent@Example.com',
                },
            )
            assert created.status_code == 201
            order = created.json()
            assert order['status'] == 'paid'
            assert order['total_amount_in_cents'] == 3000

            lookup = await client.get(
                '/api/orders/lookup',
                params={'order_number': order['order_number'].lower(), 'email': 'parent@example.com'},
            )
            assert lookup.status_code == 200
            assert lookup.json()['order']['id'] == order['id']

            wrong_email = await client.get(
                '/api/orders/lookup',
                params={'order_number': order['order_number'], 'email': 'other@example.com'},
            )
            assert wrong_email.status_code == 404

            anonymous = await client.get(f'/api/orders/{order["id"]}')
            customer = await client.get(f'/api/orders/{order["id"]}', headers=_bearer('customer'))
            staff = await client.get(f'/api/orders/{order["id"]}', headers=_bearer('staff'))
            assert anonymous.status_code == 401
            assert customer.status_code == 403
            assert staff.status_code == 200

            staff_refund = await client.post(
                f'/api/orders/{order["id"]}/refund',
                json={'amount_in_cents': 3000, 'reason': 'x'},
                headers=_bearer('staff'),
            )
            assert staff_refund.status_code == 403

            seat_map = await client.get(f'/api/shows/{show.show_id}/seats')
            assert seat_map.status_code == 200
            assert seat_map.json()['sections']['A']['sold'] == 2

    @pytest.mark.asyncio
    async def test_invalid_bearer_token_is_401(self, browser, seed_show) -> None:
        show = await seed_show(seat_count=1)

        async with browser() as client:
            response = await client.post(
                '/api/reservations',
                json={
                    'show_id': str(show.show_id),
                    'seat_ids': [str(show.show_seat_ids[0])],
                    'email': 'parent@example.com',
                },
                headers={'Authorization': 'Bearer not-a-jwt'},
            )

        assert response.status_code == 401


@pytest.mark.integration
class TestPlatformEndpoints:
    @pytest.mark.asyncio
    async def test_health_and_metrics(self, browser) -> None:
        async with browser() as client:
            health = await client.get('/health')
            metrics = await client.get('/metrics')

        assert health.json()['status'] == 'healthy'
        assert metrics.status_code == 200
