"""Prompt templates for applicant scoring and active-loan default prediction."""

import json
from typing import Any

INPUT_PLACEHOLDER = "{{INPUT_JSON}}"

RISK_SCORING_PROMPT = """
You are an AI risk analyst for a microfinance institution in Pakistan.

You will receive an anonymized user profile and loan history.
You must assess their credit risk for a new microfinance loan.

The input JSON:

{{INPUT_JSON}}

Based on this:

1. Analyze repayment behavior (if loanHistory exists).
2. Use income bracket, employment type, and region to reason about stability.
3. Consider accountAge as a proxy for relationship length with institution.

Respond with STRICT JSON ONLY, no explanations, in the following shape:

{
  "riskLevel": "LOW" | "MEDIUM" | "HIGH",
  "riskScore": number between 0 and 100,
  "riskReasons": string array (3-8 concise reasons),
  "recommendedMaxLoan": optional number (PKR),
  "recommendedTenure": optional number (months),
  "defaultProbability": optional number between 0 and 1,
  "tokensUsed": optional number
}

Rules:
- riskScore 0-100 where higher = riskier borrower.
- riskLevel must be consistent with riskScore.
- riskReasons must be high-level, anonymized explanations (no names or CNIC).
- DO NOT include any text outside of the JSON object.
"""

DEFAULT_PREDICTION_PROMPT = """
You are an AI model evaluating the default risk of a specific active microfinance loan.

The input contains:
- "currentLoan": principalAmount, outstandingBalance, monthsRemaining
- "paymentBehavior": totals and delays for installments
- "financialProfile": anonymized user profile (no PII)

Input JSON:

{{INPUT_JSON}}

Using this information, infer:

1. Probability that this loan will default in the next 12 months.
2. Main warning signals or risk factors.
3. Practical recommendations for mitigation (e.g., rescheduling, outreach, counseling).

Respond with STRICT JSON ONLY in this structure:

{
  "defaultProbability": number between 0 and 1,
  "defaultRisk": "LOW" | "MEDIUM" | "HIGH",
  "warningSignals": string[],
  "recommendations": string[]
}

Do NOT include any free-text explanation outside the JSON.
"""


def _render_input(payload: Any) -> str:
    # default=str keeps datetimes and decimals from raising
    return json.dumps(payload, indent=2, default=str, ensure_ascii=False)


def build_risk_scoring_prompt(payload: Any) -> str:
    """Compile the applicant-level risk scoring prompt."""
    return RISK_SCORING_PROMPT.replace(INPUT_PLACEHOLDER, _render_input(payload))


def build_default_prediction_prompt(payload: Any) -> str:
    """Compile the default prediction prompt for one active loan."""
    return DEFAULT_PREDICTION_PROMPT.replace(INPUT_PLACEHOLDER, _render_input(payload))
