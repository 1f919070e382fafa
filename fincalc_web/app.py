import logging
import os

from flask import Flask, jsonify, request

from fincalc.engine import (
    PAYOUT_MATURITY,
    build_deposit_schedule,
    build_schedule,
    compute_deposit,
    simulate_with_prepayments,
    solve_installment,
    summarize_fixed_installment,
)
from fincalc.main import (
    deposit_summary,
    installment_summary,
    prepayment_summary,
    serialize_balance_comparison,
    serialize_deposit_schedule,
    serialize_schedule,
)
from fincalc.utils import (
    DEPOSIT_TERM_RANGE,
    INSTALLMENT_RANGE,
    PRINCIPAL_RANGE,
    RATE_RANGE,
    TENURE_MONTHS_RANGE,
    TENURE_YEARS_RANGE,
    check_range,
    parse_date,
    to_decimal,
)

app = Flask(__name__)
app.config["SCHEDULE_PREVIEW_ROWS"] = int(os.environ.get("SCHEDULE_PREVIEW_ROWS", "120"))
app.logger.setLevel(os.environ.get("FINCALC_LOG_LEVEL", "INFO").upper())
logging.getLogger("fincalc").setLevel(app.logger.level)


class BadRequest(ValueError):
    """Raised for request bodies the calculators cannot use."""


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _required(data: dict, key: str):
    value = data.get(key)
    if value is None or value == "":
        raise BadRequest(f"Missing required field: {key}")
    return to_decimal(value)


def _bounded(data: dict, key: str, bounds):
    return check_range(key, _required(data, key), bounds)


def _tenure_years(data: dict):
    """Tenure in years; ``tenure_unit: "months"`` converts from months.

    The bound is checked in the unit the caller sent.
    """
    unit = str(data.get("tenure_unit", "years")).lower()
    if unit not in ("years", "months"):
        raise BadRequest(f"tenure_unit must be 'years' or 'months'; got {unit}")
    if unit == "months":
        return _bounded(data, "tenure", TENURE_MONTHS_RANGE) / 12
    return _bounded(data, "tenure", TENURE_YEARS_RANGE)


def _start_date(data: dict):
    value = data.get("start_date")
    if not value:
        return None
    if not isinstance(value, str):
        raise BadRequest("start_date must be a YYYY-MM-DD or YYYY-MM string")
    return parse_date(value)


def _summaries_for_view(summary: dict, schedule: list, show_full_schedule: bool):
    if show_full_schedule:
        return summary, schedule
    limit = app.config["SCHEDULE_PREVIEW_ROWS"]
    preview = schedule[:limit]
    if len(schedule) > limit:
        summary["truncated"] = len(schedule) - len(preview)
    return summary, preview


def _respond(data: dict, summary: dict, schedule: list, **extra):
    summary, schedule = _summaries_for_view(summary, schedule, bool(data.get("full_schedule")))
    return jsonify({"summary": summary, "schedule": schedule, **extra})


@app.errorhandler(ValueError)
@app.errorhandler(TypeError)
@app.errorhandler(KeyError)
def handle_bad_input(exc):
    app.logger.info("Rejected %s %s: %s", request.method, request.path, exc)
    return jsonify({"error": str(exc)}), 400


@app.get("/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/emi")
def emi():
    data = _payload()
    principal = _bounded(data, "principal", PRINCIPAL_RANGE)
    rate = _bounded(data, "rate", RATE_RANGE)
    years = _tenure_years(data)
    result = solve_installment(principal, rate, years)
    rows = build_schedule(principal, rate, years, result.installment, _start_date(data))
    return _respond(data, installment_summary(result, years), serialize_schedule(rows))


@app.post("/api/tenure")
def tenure():
    data = _payload()
    principal = _bounded(data, "principal", PRINCIPAL_RANGE)
    rate = _bounded(data, "rate", RATE_RANGE)
    installment = _bounded(data, "installment", INSTALLMENT_RANGE)
    years, result = summarize_fixed_installment(principal, rate, installment)
    rows = []
    if not result.is_unbounded:
        rows = build_schedule(principal, rate, years, installment, _start_date(data))
    return _respond(data, installment_summary(result, years), serialize_schedule(rows))


@app.post("/api/prepayment")
def prepayment():
    """Prepayment savings for a loan given by ``tenure`` or by ``installment``.

    With an installment the tenure is solved first; an installment that
    never repays the loan yields the unbounded installment summary.
    """
    data = _payload()
    has_tenure = data.get("tenure") not in (None, "")
    has_installment = data.get("installment") not in (None, "")
    if has_tenure == has_installment:
        raise BadRequest("Provide exactly one of tenure or installment")
    lump_sum_month = data.get("lump_sum_month")
    try:
        lump_sum_month = int(lump_sum_month) if lump_sum_month not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"Invalid lump_sum_month: {lump_sum_month}") from exc
    principal = _bounded(data, "principal", PRINCIPAL_RANGE)
    rate = _bounded(data, "rate", RATE_RANGE)
    start = _start_date(data)
    if has_installment:
        years, fixed = summarize_fixed_installment(principal, rate, _bounded(data, "installment", INSTALLMENT_RANGE))
        if fixed.is_unbounded:
            return _respond(data, installment_summary(fixed, years), [], comparison=[])
    else:
        years = _tenure_years(data)
    outcome = simulate_with_prepayments(
        principal,
        rate,
        years,
        recurring_amount=to_decimal(data.get("recurring_amount", 0)),
        recurring_frequency=str(data.get("recurring_frequency", "monthly")),
        lump_sum_amount=to_decimal(data.get("lump_sum_amount", 0)),
        lump_sum_at_month=lump_sum_month,
        start_date=start,
    )
    standard = build_schedule(principal, rate, years, solve_installment(principal, rate, years).installment, start)
    return _respond(
        data,
        prepayment_summary(outcome),
        serialize_schedule(outcome.schedule),
        comparison=serialize_balance_comparison(standard, outcome.schedule),
    )


@app.post("/api/deposit")
def deposit():
    data = _payload()
    principal = _bounded(data, "principal", PRINCIPAL_RANGE)
    rate = _bounded(data, "rate", RATE_RANGE)
    term = _bounded(data, "term", DEPOSIT_TERM_RANGE)
    compounding = data.get("compounding", 1)
    payout = data.get("payout", PAYOUT_MATURITY)
    result = compute_deposit(principal, rate, term, compounding, payout)
    rows = build_deposit_schedule(principal, rate, term, compounding, _start_date(data), payout)
    return _respond(data, deposit_summary(result, principal), serialize_deposit_schedule(rows))


if __name__ == "__main__":
    print("Starting finance calculator API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
