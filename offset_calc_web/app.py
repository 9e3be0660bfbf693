from datetime import datetime, timedelta
from typing import Optional

from flask import Flask, jsonify, request

from offset_calc.cashflow import summarize_cash_flow, transactions_from_records
from offset_calc.comparison import simulate
from offset_calc.config import Settings
from offset_calc.eligibility import check_eligibility
from offset_calc.formatter import cash_flow_to_dict, simulation_to_dict
from offset_calc.logging_config import get_logger, setup_logging
from offset_calc.rates import RateCache
from offset_calc.validation import FieldError, ValidationError, input_from_mapping

logger = get_logger(__name__)


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError([FieldError("body", "must be a JSON object")])
    return payload


def _number(payload: dict, *names: str) -> float:
    """Read the first present key of ``names`` from ``payload`` as a float."""
    for name in names:
        if name in payload and payload[name] is not None:
            try:
                return float(payload[name])
            except (TypeError, ValueError):
                raise ValidationError([FieldError(names[0], f"must be a number; got {payload[name]!r}")]) from None
    raise ValidationError([FieldError(names[0], "is required")])


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the JSON API around ``offset_calc``.

    Each app owns its own ``RateCache``; two apps never share a cached rate.
    """
    settings = settings or Settings()
    setup_logging(settings)

    app = Flask(__name__)
    app.secret_key = settings.SECRET_KEY
    app.config["OFFSET_CALC_SETTINGS"] = settings
    rate_cache = RateCache(ttl=timedelta(seconds=settings.RATE_TTL_SECONDS))
    app.extensions["rate_cache"] = rate_cache

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        logger.info("Rejected request to %s: %s", request.path, exc)
        return jsonify(exc.as_dict()), 400

    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok", "app": settings.APP_NAME})

    @app.post("/api/simulate")
    def simulate_endpoint():
        payload = _json_body()
        summary = None
        if payload.get("transactions") is not None:
            # Income and expenses are averaged from the statement lines.
            summary = summarize_cash_flow(transactions_from_records(payload["transactions"]))
        data = input_from_mapping(payload, cash_flow=summary)
        result = simulate(data, **settings.simulation_options())
        body = simulation_to_dict(result)
        if summary is not None:
            body["cash_flow"] = cash_flow_to_dict(summary)
        return jsonify(body)

    @app.post("/api/eligibility")
    def eligibility_endpoint():
        payload = _json_body()
        balance = _number(payload, "starting_balance", "startingBalance")
        property_value = _number(payload, "property_value", "propertyValue")
        net_cash_flow = _number(payload, "net_cash_flow", "netCashFlow")
        if property_value <= 0:
            raise ValidationError([FieldError("property_value", "must be > 0")])
        result = check_eligibility(balance, property_value, net_cash_flow)
        return jsonify(
            {
                "eligible": result.eligible,
                "ltv": round(result.ltv, 2),
                "ltv_passed": result.ltv_passed,
                "cash_flow_passed": result.cash_flow_passed,
                "reasons": result.reasons,
            }
        )

    @app.get("/api/rate")
    def rate_endpoint():
        # No live rate provider is wired in; the configured rate stands in.
        cached = rate_cache.get(lambda: settings.FALLBACK_RATE, datetime.now(), source="fallback")
        return jsonify(
            {
                "rate": cached.value,
                "source": cached.source,
                "fetched_at": cached.fetched_at.isoformat(),
                "ttl_seconds": settings.RATE_TTL_SECONDS,
            }
        )

    return app


if __name__ == "__main__":
    print("Starting offset loan calculator API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
