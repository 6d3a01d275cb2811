"""
Advice engine: turns a projection (snapshot series + household parameters)
into ranked, actionable retirement recommendations.

Modules
-------
scoring    : amortisation / annuity maths, cash-flow feasibility buckets,
             clamp + finite guard; pure functions, no I/O.
strategies : per-category candidate generators (debt, investment, expense,
             income, person-specific).
cache      : BoundedCache + advice_fingerprint() + CachedStrategy wrapper.
targeting  : validate / apply person-targeted mutation descriptors.
ranker     : rank_recommendations() + quick-win / long-term partition.
integrity  : post-generation consistency checks on a RetirementAdvice.
telemetry  : TelemetrySink, an owned operation timer.
engine     : AdviceEngine.generate(), which orchestrates the above.
errors     : AdviceGenerationFailure exception hierarchy.
"""
