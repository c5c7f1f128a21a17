import pytest
from datetime import date

from expense_predictor.domain.models import Prediction, Transaction
from expense_predictor.ledger.ledger import Ledger
from expense_predictor.prediction.errors import DegenerateAmountError
from expense_predictor.prediction.scorer import CategoryScorer, amount_ratio, rate_deviation


@pytest.mark.unit
class TestAmountRatio:

    def test_relative_to_historical_amount(self):
        txn = Transaction(date(2024, 3, 1), 40.0, "Food")

        assert amount_ratio(txn, 50.0) == pytest.approx(0.25)
        assert amount_ratio(txn, 30.0) == pytest.approx(0.25)

    def test_negative_amounts(self):
        txn = Transaction(date(2024, 3, 1), -20.0, "Refunds")

        assert amount_ratio(txn, -25.0) == pytest.approx(0.25)

    def test_zero_amount_raises(self):
        txn = Transaction(date(2024, 3, 1), 0.0, "Food")

        with pytest.raises(DegenerateAmountError):
            amount_ratio(txn, 10.0)


@pytest.mark.unit
class TestRateDeviation:

    def test_overshoot(self):
        assert rate_deviation(30.0, 20.0) == pytest.approx(0.5)

    def test_undershoot(self):
        assert rate_deviation(10.0, 20.0) == pytest.approx(-0.5)

    def test_zero_long_run_rate_is_undefined(self):
        assert rate_deviation(10.0, 0.0) is None

    def test_missing_rates_are_undefined(self):
        assert rate_deviation(None, 10.0) is None
        assert rate_deviation(10.0, None) is None


@pytest.mark.unit
class TestCategoryScorer:

    def test_steady_category(self, ledger: Ledger):
        # Arrange
        scorer = CategoryScorer(ledger)

        # Act
        prediction = scorer.score("Groceries", date(2024, 3, 12), 50.0)

        # Assert
        assert prediction.count == 5
        # short run 100 over 4 days vs long run 250 over 5 days
        assert prediction.expense_rate_deviation == pytest.approx(-0.5)
        assert prediction.nearest_amount_diff == 0.0
        assert prediction.second_nearest_amount_diff == pytest.approx(0.0)
        assert prediction.skipped_comparators == 0
        assert prediction.is_valid

    def test_amount_diffs_are_sorted(self, make_history):
        # Arrange
        ledger = Ledger(make_history("Fuel", [10.0, 10.0, 10.0, 10.0, 80.0, 40.0, 60.0, 50.0]))
        scorer = CategoryScorer(ledger)

        # Act - window is the last four: 80, 40, 60, 50
        prediction = scorer.score("Fuel", date(2024, 3, 20), 55.0)

        # Assert
        assert prediction.count == 4
        assert prediction.nearest_amount_diff == pytest.approx(5 / 60)
        assert prediction.second_nearest_amount_diff == pytest.approx(5 / 50)

    def test_unknown_category_gives_degenerate_prediction(self, ledger: Ledger):
        # Act
        prediction = CategoryScorer(ledger).score("Travel", date(2024, 3, 12), 50.0)

        # Assert
        assert prediction == Prediction(
            count=1,
            expense_rate_deviation=None,
            nearest_amount_diff=None,
            second_nearest_amount_diff=None,
        )
        assert not prediction.is_valid

    def test_zero_long_run_rate(self, make_history):
        # Arrange - the last four amounts cancel out
        ledger = Ledger(make_history("Transfers", [10.0, -10.0] * 4))

        # Act
        prediction = CategoryScorer(ledger).score("Transfers", date(2024, 3, 12), 10.0)

        # Assert
        assert prediction.count == 4
        assert prediction.expense_rate_deviation is None
        assert prediction.nearest_amount_diff == 0.0

    def test_zero_amount_comparator_is_skipped(self, make_history, mocker):
        # Arrange
        mock_logger = mocker.patch("expense_predictor.prediction.scorer.logger")
        ledger = Ledger(make_history("Food", [10.0, 20.0, 0.0, 30.0]))

        # Act - long-run window is the 3rd and 4th of March
        prediction = CategoryScorer(ledger).score("Food", date(2024, 3, 6), 30.0)

        # Assert
        assert prediction.count == 2
        assert prediction.nearest_amount_diff == 0.0
        assert prediction.second_nearest_amount_diff is None
        assert prediction.skipped_comparators == 1
        # 30 over 3 days now vs 30 over 2 days before
        assert prediction.expense_rate_deviation == pytest.approx(-1 / 3)
        mock_logger.warning.assert_called_once()

    def test_only_zero_amounts_leave_diffs_absent(self, make_history):
        # Arrange
        ledger = Ledger(make_history("Void", [0.0, 0.0]))

        # Act
        prediction = CategoryScorer(ledger).score("Void", date(2024, 3, 5), 10.0)

        # Assert
        assert prediction.nearest_amount_diff is None
        assert prediction.second_nearest_amount_diff is None
        assert prediction.skipped_comparators == 1
        assert prediction.expense_rate_deviation is None

    def test_candidate_day_is_left_out_of_long_run(self):
        # Arrange - two purchases already on the candidate's day
        ledger = Ledger([
            Transaction(date(2024, 3, 1), 20.0, "Food"),
            Transaction(date(2024, 3, 2), 20.0, "Food"),
            Transaction(date(2024, 3, 5), 100.0, "Food"),
            Transaction(date(2024, 3, 5), 100.0, "Food"),
        ])

        # Act
        prediction = CategoryScorer(ledger).score("Food", date(2024, 3, 5), 20.0)

        # Assert - long run: 40 over 2 days; short run: 200 over the 3rd to 5th
        assert prediction.count == 2
        assert prediction.nearest_amount_diff == 0.0
        assert prediction.expense_rate_deviation == pytest.approx((200.0 / 3 - 20.0) / 20.0)
