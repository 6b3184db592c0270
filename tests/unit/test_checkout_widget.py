import pytest

from eventify.checkout.widget import CallbackWidgetAdapter, WidgetConfig, WidgetOutcome

class _FakeSdk:
    """Records the options and lets the test fire the callbacks."""

    def __init__(self, fire=None):
        self.options = None
        self.opened = False
        self.fire = fire

    def setup(self, options):
        self.options = options
        return self

    def openIframe(self):
        self.opened = True
        if self.fire:
            self.fire(self.options)

CONFIG = WidgetConfig(public_key="pk_test", email="a@b.co", amount=500000, reference="ref_123")

@pytest.mark.asyncio
async def test_adapter_passes_server_values_and_resolves_on_success():
    sdk = _FakeSdk(fire=lambda o: o["callback"]({"reference": "ref_123", "status": "success"}))
    result = await CallbackWidgetAdapter(sdk.setup).open(CONFIG)
    assert sdk.opened
    assert sdk.options["amount"] == 500000
    assert sdk.options["ref"] == "ref_123"
    assert sdk.options["currency"] == "NGN"
    assert result.outcome is WidgetOutcome.SUCCESS
    assert result.response["status"] == "success"

@pytest.mark.asyncio
async def test_adapter_resolves_closed_and_first_callback_wins():
    def fire(options):
        options["onClose"]()
        options["callback"]({"status": "success"})

    result = await CallbackWidgetAdapter(_FakeSdk(fire=fire).setup).open(CONFIG)
    assert result.outcome is WidgetOutcome.CLOSED
    assert result.reference == "ref_123"
