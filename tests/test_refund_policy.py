from datetime import datetime, timedelta

import pytest

from services.refund_policy import evaluate_refund

NOW = datetime(2030, 1, 10, 8, 0)


class TestRefundPolicy:
    def test_more_than_24_hours_out_refunds_90_percent(self):
        decision = evaluate_refund(NOW, NOW + timedelta(hours=30), 1001, 'confirmed')

        assert decision.can_cancel is True
        assert decision.refund_amount == 900  # floor(900.9)

    def test_between_2_and_24_hours_refunds_half(self):
        decision = evaluate_refund(NOW, NOW + timedelta(hours=10), 999, 'confirmed')

        assert decision.can_cancel is True
        assert decision.refund_amount == 499

    def test_exactly_24_hours_is_the_half_refund_band(self):
        decision = evaluate_refund(NOW, NOW + timedelta(hours=24), 1000, 'confirmed')

        assert decision.refund_amount == 500

    @pytest.mark.parametrize('hours', [1, 2, -5])
    def test_inside_cutoff_cannot_cancel(self, hours):
        decision = evaluate_refund(NOW, NOW + timedelta(hours=hours), 1000, 'confirmed')

        assert decision.can_cancel is False
        assert decision.refund_amount == 0

    @pytest.mark.parametrize('status', ['pending', 'cancelled', 'completed'])
    def test_only_confirmed_bookings_are_cancellable(self, status):
        decision = evaluate_refund(NOW, NOW + timedelta(days=5), 1000, status)

        assert decision.can_cancel is False
        assert decision.refund_amount == 0
