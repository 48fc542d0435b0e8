# -*- coding: utf-8 -*-
"""
Verdict texts.
Fixed summary / harm / advice wording for each verdict type and path.
"""
from __future__ import annotations

from typing import Dict, Sequence

from safetykit.models import Verdict, VerdictType

SAFE_THRESHOLD = 85
DANGER_THRESHOLD = 60

# (summary, harm, advice)
URL_TEXTS: Dict[VerdictType, tuple] = {
    VerdictType.DANGER: (
        "🚨 High Risk: this link scored {score}/100.",
        "It could harm your device or steal your info.",
        "Do not visit this site. It's dangerous.",
    ),
    VerdictType.WARNING: (
        "⚠️ Medium Risk: this link scored {score}/100.",
        "Might try to trick you or install bad software.",
        "Be careful or avoid it.",
    ),
    VerdictType.SAFE: (
        "✅ Low Risk: this link scored {score}/100.",
        "No big problems found.",
        "Looks okay, but stay alert.",
    ),
}

EMAIL_TEXTS: Dict[VerdictType, tuple] = {
    VerdictType.DANGER: (
        "🚨 This email ({address}) looks risky: {reputation} (EmailRep).",
        "Could be used for scams, phishing or have been compromised.",
        "Do not trust requests from this address. Verify via another channel "
        "before replying or clicking links.",
    ),
    VerdictType.WARNING: (
        "⚠️ This email ({address}) has mixed signals: {reputation}.",
        "May be legitimate but caution is advised.",
        "Confirm identity via a known channel and avoid sharing secrets.",
    ),
    VerdictType.SAFE: (
        "✅ This email ({address}) has a high reputation (looks legitimate).",
        "Still possible the owner's account could be compromised, always check content.",
        "Okay to proceed after usual checks (hover links, no attachments unless expected).",
    ),
    VerdictType.INFO: (
        "Analysis complete.",
        "General online risks apply.",
        "Use caution and verify unknown senders.",
    ),
}

HEADER_TEXTS: Dict[VerdictType, tuple] = {
    VerdictType.DANGER: (
        "🚨 DANGER: Headers show strong signs of spoofing or failure of authentication.",
        "Phishing, credential theft, malware.",
        "Do NOT click links/attachments. Mark as spam and verify with the sender "
        "via known channels.",
    ),
    VerdictType.WARNING: (
        "⚠️ CAUTION: Some authentication checks returned soft failures/errors.",
        "Might be forged or misconfigured.",
        "Proceed carefully and verify.",
    ),
    VerdictType.SAFE: (
        "✅ Authentication passed (SPF & DKIM). Less likely to be spoofed.",
        "Still possible account is compromised; inspect content.",
        "You can be more confident, but verify links/requests.",
    ),
    VerdictType.INFO: (
        "Initial analysis complete. Review details.",
        "Not enough information to determine immediate harm. Be cautious.",
        "Check links, attachments and verify sender by another channel.",
    ),
}


def verdict_type_for_score(score: int) -> VerdictType:
    if score >= SAFE_THRESHOLD:
        return VerdictType.SAFE
    if score > DANGER_THRESHOLD:
        return VerdictType.WARNING
    return VerdictType.DANGER


def _build(texts: Dict[VerdictType, tuple], vtype: VerdictType, **fmt) -> tuple:
    summary, harm, advice = texts[vtype]
    return summary.format(**fmt), harm.format(**fmt), advice.format(**fmt)


def url_verdict(score: int, reasons: Sequence[str] = ()) -> Verdict:
    vtype = verdict_type_for_score(score)
    summary, harm, advice = _build(URL_TEXTS, vtype, score=score)
    return Verdict(vtype, summary, harm, advice, score=score, reasons=tuple(reasons))


def email_verdict(vtype: VerdictType, address: str, reputation: str,
                  reasons: Sequence[str] = ()) -> Verdict:
    summary, harm, advice = _build(
        EMAIL_TEXTS, vtype, address=address, reputation=reputation or "suspicious"
    )
    return Verdict(vtype, summary, harm, advice, reasons=tuple(reasons))


def header_verdict(vtype: VerdictType, reasons: Sequence[str] = ()) -> Verdict:
    summary, harm, advice = _build(HEADER_TEXTS, vtype)
    return Verdict(vtype, summary, harm, advice, reasons=tuple(reasons))
