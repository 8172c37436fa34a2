"""Lead quality score.

The basic part is computed from the lead's own fields:

* web presence: 25 when a website is set
* contact info: 10 for an email plus 10 for a phone number
* social profiles: 10 per profile, capped at 30

An enriching provider adds online mentions (7 per search hit for the lead's
name and company, at most 3 hits, capped at 20) and website content (15 when
the website could be scraped). The total is clamped to 100.
"""

import logging

from nexacrm.models.lead import Lead, clamp_score
from nexacrm.services.search_provider import SearchProvider

logger = logging.getLogger(__name__)

WEB_PRESENCE_POINTS = 25
CONTACT_POINTS = 10
SOCIAL_POINTS_PER_PROFILE = 10
SOCIAL_POINTS_CAP = 30
MENTION_SEARCH_LIMIT = 5
MAX_MENTIONS = 3
POINTS_PER_MENTION = 7
MENTION_POINTS_CAP = 20
WEBSITE_CONTENT_POINTS = 15

BASIC_SUMMARY = "Scored from known lead data only; configure FIRECRAWL_API_KEY for online enrichment."


def basic_breakdown(lead: Lead) -> dict[str, int]:
    social_count = len(lead.social_profiles or {})
    return {
        "web_presence": WEB_PRESENCE_POINTS if lead.website else 0,
        "contact_info": (CONTACT_POINTS if lead.email else 0) + (CONTACT_POINTS if lead.phone else 0),
        "social_profiles": min(social_count * SOCIAL_POINTS_PER_PROFILE, SOCIAL_POINTS_CAP),
        "online_mentions": 0,
        "website_content": 0,
    }


def mention_query(lead: Lead) -> str:
    query = f'"{lead.name}"'
    if lead.company:
        query += f' "{lead.company}"'
    return query


async def score_lead(lead: Lead, provider: SearchProvider) -> dict:
    breakdown = basic_breakdown(lead)
    if not provider.enriches:
        return {
            "score": clamp_score(sum(breakdown.values())),
            "breakdown": breakdown,
            "mentions": [],
            "source": "basic",
            "summary": BASIC_SUMMARY,
        }

    results = await provider.search(mention_query(lead), MENTION_SEARCH_LIMIT)
    mentions = (results or [])[:MAX_MENTIONS]
    breakdown["online_mentions"] = min(len(mentions) * POINTS_PER_MENTION, MENTION_POINTS_CAP)

    website_summary = None
    if lead.website:
        website_summary = await provider.scrape(lead.website)
        if website_summary:
            breakdown["website_content"] = WEBSITE_CONTENT_POINTS

    score = clamp_score(sum(breakdown.values()))
    logger.debug("Lead %s scored %s via %s", lead.id, score, provider.source)
    return {
        "score": score,
        "breakdown": breakdown,
        "mentions": [
            {"url": m.get("url"), "title": m.get("title"), "description": m.get("description")}
            for m in mentions
        ],
        "website_summary": website_summary,
        "source": provider.source,
    }
