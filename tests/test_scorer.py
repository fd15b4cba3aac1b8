"""
Tests for relevance_engine.relevance.scorer module.
"""

import pytest

from conftest import make_org, make_trend
from relevance_engine.relevance.exceptions import OrganizationNotFoundError
from relevance_engine.relevance.scorer import (
    affinity_points,
    entity_matches,
    normalize_entity,
    priority_bucket,
    score_organization,
    score_trend,
)


class TestHelpers:

    def test_normalize_entity(self):
        assert normalize_entity('  H.R.  1234 ') == 'h r 1234'
        assert normalize_entity(None) == ''

    def test_entity_matches_both_directions(self):
        assert entity_matches('Sanders', ['Bernie Sanders'])
        assert entity_matches('Bernie Sanders', ['sanders'])
        assert not entity_matches('Warren', ['Bernie Sanders'])
        assert not entity_matches('', ['Bernie Sanders'])

    def test_entity_matches_whole_tokens_only(self):
        assert not entity_matches('ICE', ['Police reform bill advances'])
        assert not entity_matches('H.R. 1', ['H.R. 1234'])
        assert entity_matches('H.R. 1234', ['Debate on H.R. 1234 continues'])

    def test_priority_buckets(self):
        assert priority_bucket(55) == 'high'
        assert priority_bucket(54) == 'medium'
        assert priority_bucket(30) == 'medium'
        assert priority_bucket(29) == 'low'
        assert priority_bucket(0) == 'low'

    def test_affinity_points_use_mean(self):
        assert affinity_points([0.9, 0.3]) == 12
        assert affinity_points([]) == 0

    def test_affinity_points_capped(self):
        assert affinity_points([1.0, 1.0]) == 20
        assert affinity_points([5.0]) == 20


class TestScoreTrend:

    def test_missing_organization_raises(self):
        with pytest.raises(OrganizationNotFoundError):
            score_trend(make_trend(), None)

    def test_empty_profile_scores_zero(self):
        result = score_trend(make_trend(policy_domains=['Housing'], geographies=['US']), make_org())
        assert result.score == 0
        assert result.priority_bucket == 'low'
        assert result.reasons == []

    def test_domain_match_with_exploration(self):
        trend = make_trend(policy_domains=['Housing'])
        org = make_org(policy_domains=['Housing'])
        result = score_trend(trend, org)
        assert result.score == 30
        assert result.matched_domains == ['Housing']
        assert result.breakdown == {'domain': 20, 'exploration': 10}
        assert 'new-opportunity' in result.flags
        assert result.priority_bucket == 'medium'

    def test_domain_points_capped(self):
        domains = ['Housing', 'Healthcare', 'Education']
        org = make_org(policy_domains=domains)
        result = score_trend(make_trend(policy_domains=domains), org)
        assert result.breakdown['domain'] == 35

    def test_domain_match_is_case_insensitive(self):
        result = score_trend(make_trend(policy_domains=['Housing']), make_org(policy_domains=['housing']))
        assert result.breakdown['domain'] == 20

    def test_affinity_average_not_max(self):
        trend = make_trend(policy_domains=['Housing'], context_terms=['rent control'])
        org = make_org(affinities={'housing': 0.9, 'rent control': 0.3})
        result = score_trend(trend, org)
        assert result.breakdown == {'affinity': 12}
        assert result.score == 12

    def test_affinity_ignores_unshared_topics(self):
        trend = make_trend(policy_domains=['Housing'])
        org = make_org(affinities={'housing': 0.5, 'immigration': 0.95})
        result = score_trend(trend, org)
        assert result.breakdown['affinity'] == 10

    def test_proven_topic_suppresses_exploration(self):
        trend = make_trend(policy_domains=['Housing'])
        org = make_org(policy_domains=['Housing'], affinities={'housing': (0.7, 3)})
        result = score_trend(trend, org)
        assert 'proven-topic' in result.flags
        assert 'new-opportunity' not in result.flags
        assert result.score == 20 + 14

    def test_focus_areas(self):
        trend = make_trend(title='Rent control fight', context_terms=['tenant protections'])
        org = make_org(focus_areas=['rent control', 'tenant protections', 'zoning'])
        result = score_trend(trend, org)
        assert result.breakdown == {'focus_area': 20}

    def test_watchlist_match(self):
        trend = make_trend(politicians=['Bernie Sanders'])
        org = make_org(watchlist=['Sanders'])
        result = score_trend(trend, org)
        assert result.matched_watchlist == ['Sanders']
        assert 'watchlist-match' in result.flags
        assert result.breakdown == {'watchlist': 10}

    def test_watchlist_matches_title(self):
        trend = make_trend(title='Debate over the Inflation Reduction Act')
        org = make_org(watchlist=['Inflation Reduction Act', 'Chuck Schumer'])
        result = score_trend(trend, org)
        assert result.matched_watchlist == ['Inflation Reduction Act']

    def test_watchlist_points_capped(self):
        trend = make_trend(politicians=['Bernie Sanders', 'Elizabeth Warren'])
        org = make_org(watchlist=['Sanders', 'Warren'])
        assert score_trend(trend, org).breakdown['watchlist'] == 15

    def test_blocked_entity(self):
        trend = make_trend(policy_domains=['Housing'], politicians=['Donald Trump'])
        org = make_org(policy_domains=['Housing'], watchlist=[('Trump', 'block')])
        result = score_trend(trend, org)
        assert result.blocked
        assert result.score == 0
        assert result.flags == ['blocked']

    def test_block_rule_ignores_partial_words(self):
        trend = make_trend(title='Police reform bill advances', policy_domains=['Criminal Justice'])
        org = make_org(policy_domains=['Criminal Justice'], watchlist=[('ICE', 'block')])
        result = score_trend(trend, org)
        assert not result.blocked
        assert result.breakdown['domain'] == 20

    def test_block_rule_on_bill_number(self):
        trend = make_trend(legislation=['H.R. 1234'])
        assert not score_trend(trend, make_org(watchlist=[('H.R. 1', 'block')])).blocked
        assert score_trend(trend, make_org(watchlist=[('H.R. 1234', 'block')])).blocked

    def test_geography_match(self):
        trend = make_trend(geographies=['CA'])
        result = score_trend(trend, make_org(geographies=['ca', 'NY']))
        assert result.score == 5
        assert result.matched_geographies == ['CA']

    def test_breaking_needs_relevance_first(self):
        trend = make_trend(geographies=['US'], is_breaking=True)
        result = score_trend(trend, make_org(geographies=['US']))
        assert result.score == 5
        assert 'breaking' not in result.flags

    def test_breaking_boost_at_floor(self):
        trend = make_trend(title='Rent control and eviction fight', is_breaking=True)
        org = make_org(focus_areas=['rent control', 'eviction'])
        result = score_trend(trend, org)
        assert result.score == 25
        assert 'breaking' in result.flags

    def test_score_clamped_to_100(self):
        domains = ['Housing', 'Healthcare', 'Education']
        trend = make_trend(
            title='Schumer and Warren push rent control, medical debt relief and school funding',
            policy_domains=domains,
            politicians=['Chuck Schumer', 'Elizabeth Warren'],
            geographies=['US'],
            is_breaking=True,
        )
        org = make_org(
            policy_domains=domains,
            focus_areas=['rent control', 'medical debt', 'school funding'],
            watchlist=['Chuck Schumer', 'Elizabeth Warren'],
            geographies=['US'],
            affinities={'housing': 1.0},
        )
        result = score_trend(trend, org)
        assert sum(result.breakdown.values()) == 110
        assert result.score == 100
        assert result.priority_bucket == 'high'

    def test_reasons_follow_term_order(self):
        trend = make_trend(policy_domains=['Housing'], geographies=['CA'])
        org = make_org(policy_domains=['Housing'], geographies=['CA'])
        reasons = score_trend(trend, org).reasons
        assert reasons[0].startswith('Policy domain match')
        assert reasons[1].startswith('New opportunity')
        assert reasons[2].startswith('Geographic relevance')

    def test_score_organization(self):
        trends = [make_trend(1, policy_domains=['Housing']), make_trend(2)]
        results = score_organization(make_org(policy_domains=['Housing']), trends)
        assert [r.trend_id for r in results] == [1, 2]
        assert [r.score for r in results] == [30, 0]
