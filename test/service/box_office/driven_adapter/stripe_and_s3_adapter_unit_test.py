"""Payment provider and object storage adapters with the vendor SDKs mocked out."""

from unittest.mock import MagicMock

from botocore.exceptions import ClientError
import pytest
import stripe

from src.platform.exception.exceptions import NotFoundError, UpstreamServiceError
from src.service.box_office.driven_adapter.payment.stripe_payment_gateway import (
    StripePaymentGateway,
)
from src.service.box_office.driven_adapter.storage.s3_object_storage import S3ObjectStorage


@pytest.mark.unit
class TestStripePaymentGateway:
    @pytest.mark.asyncio
    async def test_retrieve_payment_maps_intent(self, monkeypatch: pytest.MonkeyPatch) -> None:
        retrieve = MagicMock(
            return_value={'id': 'pi_123', 'status': 'succeeded', 'amount': 3000, 'currency': 'usd'}
        )
        monkeypatch.setattr(stripe.PaymentIntent, 'retrieve', retrieve)

        payment = await StripePaymentGateway(api_key='sk_test_x').retrieve_payment(
            reference='pi_123'
        )

        assert payment.is_succeeded is True
        assert payment.amount_in_cents == 3000
        retrieve.assert_called_once_with('pi_123', api_key='sk_test_x')

    @pytest.mark.asyncio
    async def test_refund_carries_reason_in_metadata(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        create = MagicMock(return_value={'id': 're_1', 'status': 'succeeded', 'amount': 1000})
        monkeypatch.setattr(stripe.Refund, 'create', create)

        refund = await StripePaymentGateway(api_key='sk_test_x').create_refund(
            reference='pi_123',
            amount_in_cents=1000,
            reason='Family emergency',
            metadata={'order_number': 'ORD-20260501-ABC123'},
        )

        assert refund.id == 're_1'
        assert refund.is_succeeded is True
        kwargs = create.call_args.kwargs
        assert kwargs['payment_intent'] == 'pi_123'
        assert kwargs['amount'] == 1000
        assert kwargs['reason'] == 'requested_by_customer'
        assert kwargs['metadata'] == {
            'order_number': 'ORD-20260501-ABC123',
            'refund_reason': 'Family emergency',
        }

    @pytest.mark.asyncio
    async def test_provider_errors_become_upstream_errors(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            stripe.PaymentIntent, 'retrieve', MagicMock(side_effect=stripe.StripeError('boom'))
        )

        with pytest.raises(UpstreamServiceError):
            await StripePaymentGateway(api_key='sk_test_x').retrieve_payment(reference='pi_404')

    @pytest.mark.asyncio
    async def test_create_payment_intent_passes_key_and_metadata(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        create = MagicMock(
            return_value={
                'id': 'pi_new',
                'client_secret': 'pi_new_secret_abc',
                'status': 'requires_payment_method',
                'amount': 3000,
                'currency': 'usd',
            }
        )
        monkeypatch.setattr(stripe.PaymentIntent, 'create', create)

        intent = await StripePaymentGateway(api_key='sk_test_x').create_payment_intent(
            amount_in_cents=3000,
            currency='usd',
            metadata={'reservation_id': 'r-1'},
            idempotency_key='reservation-r-1-3000',
            receipt_email='parent@example.com',
        )

        assert intent.id == 'pi_new'
        assert intent.client_secret == 'pi_new_secret_abc'
        assert intent.amount_in_cents == 3000
        kwargs = create.call_args.kwargs
        assert kwargs['amount'] == 3000
        assert kwargs['currency'] == 'usd'
        assert kwargs['metadata'] == {'reservation_id': 'r-1'}
        assert kwargs['idempotency_key'] == 'reservation-r-1-3000'
        assert kwargs['receipt_email'] == 'parent@example.com'
        assert kwargs['api_key'] == 'sk_test_x'

    @pytest.mark.asyncio
    async def test_create_payment_intent_provider_error_is_upstream_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            stripe.PaymentIntent, 'create', MagicMock(side_effect=stripe.StripeError('declined'))
        )

        with pytest.raises(UpstreamServiceError):
            await StripePaymentGateway(api_key='sk_test_x').create_payment_intent(
                amount_in_cents=3000, currency='usd'
            )


def _client_error(code: str) -> ClientError:
    return ClientError({'Error': {'Code': code, 'Message': code}}, 'GetObject')


@pytest.mark.unit
class TestS3ObjectStorage:
    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self) -> None:
        client = MagicMock()
        storage = S3ObjectStorage(
            public_base_url='https://cdn.studio.test/storage/', region='us-east-1', client=client
        )

        url = await storage.upload(
            bucket='tickets', path='abc.pdf', data=b'%PDF', content_type='application/pdf'
        )

        assert url == 'https://cdn.studio.test/storage/tickets/abc.pdf'
        client.put_object.assert_called_once_with(
            Bucket='tickets', Key='abc.pdf', Body=b'%PDF', ContentType='application/pdf'
        )

    def test_public_url_fallbacks(self) -> None:
        minio = S3ObjectStorage(endpoint_url='http://minio:9000/', client=MagicMock())
        aws = S3ObjectStorage(region='eu-west-1', client=MagicMock())
        minio.public_base_url = aws.public_base_url = ''
        aws.endpoint_url = None

        assert minio.public_url(bucket='tickets', path='a.pdf') == 'http://minio:9000/tickets/a.pdf'
        assert aws.public_url(bucket='tickets', path='a.pdf') == (
            'https://tickets.s3.eu-west-1.amazonaws.com/a.pdf'
        )

    @pytest.mark.asyncio
    async def test_download_maps_missing_object_to_404(self) -> None:
        client = MagicMock()
        client.get_object = MagicMock(side_effect=_client_error('NoSuchKey'))
        storage = S3ObjectStorage(client=client)

        with pytest.raises(NotFoundError):
            await storage.download(bucket='tickets', path='missing.pdf')

    @pytest.mark.asyncio
    async def test_download_other_errors_are_upstream(self) -> None:
        client = MagicMock()
        client.get_object = MagicMock(side_effect=_client_error('AccessDenied'))
        storage = S3ObjectStorage(client=client)

        with pytest.raises(UpstreamServiceError):
            await storage.download(bucket='tickets', path='a.pdf')

    @pytest.mark.asyncio
    async def test_download_reads_body(self) -> None:
        body = MagicMock()
        body.read = MagicMock(return_value=b'%PDF-1.4')
        client = MagicMock()
        client.get_object = MagicMock(return_value={'Body': body})

        content = await S3ObjectStorage(client=client).download(bucket='tickets', path='a.pdf')

        assert content == b'%PDF-1.4'
