from relevance_engine import db
from relevance_engine.lib.time import utcnow_naive


class NewsSource(db.Model):
    """
    A content source feeding the trend detector.
    Sources can be pre-assigned to policy domains (e.g. a health desk feed).
    """
    __tablename__ = 'news_source'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, unique=True)
    url = db.Column(db.String(500))
    policy_domains = db.Column(db.JSON, default=list)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow_naive)

    def __repr__(self):
        return f'<NewsSource {self.name}>'


class Trend(db.Model):
    """
    A detected news/social topic considered for recommendation.

    Tag fields (policy_domains .. evidence_by_domain) are owned by the
    classifier and overwritten on each tagging pass. Resolved trends are
    frozen; trends are never deleted, only marked inactive.
    """
    __tablename__ = 'trend'
    __table_args__ = (
        db.Index('idx_trend_active', 'is_active'),
        db.Index('idx_trend_last_seen', 'last_seen_at'),
        db.Index('idx_trend_confidence', 'confidence_score'),
    )

    id = db.Column(db.Integer, primary_key=True)
    trend_key = db.Column(db.String(200), nullable=False, unique=True)
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text)
    context_terms = db.Column(db.JSON, default=list)  # ["rent control", "tenant"]

    # Tags
    policy_domains = db.Column(db.JSON, default=list)
    geographies = db.Column(db.JSON, default=list)  # ["CA", "US", "international"]
    geo_level = db.Column(db.String(20), default='national')  # local/state/international/national
    politicians_mentioned = db.Column(db.JSON, default=list)
    organizations_mentioned = db.Column(db.JSON, default=list)
    legislation_mentioned = db.Column(db.JSON, default=list)
    evidence_by_domain = db.Column(db.JSON, default=dict)  # {"Housing": ["rent control", "eviction"]}

    # Signals
    is_breaking = db.Column(db.Boolean, default=False)
    velocity = db.Column(db.Float, default=0.0)
    confidence_score = db.Column(db.Float, default=0.0)

    # Lifecycle
    is_active = db.Column(db.Boolean, default=True)
    resolved_at = db.Column(db.DateTime)

    # Tagging bookkeeping
    tagged_at = db.Column(db.DateTime)
    tagger_version = db.Column(db.String(64))
    content_hash = db.Column(db.String(64))

    first_seen_at = db.Column(db.DateTime, default=utcnow_naive)
    last_seen_at = db.Column(db.DateTime, default=utcnow_naive)
    created_at = db.Column(db.DateTime, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, default=utcnow_naive, onupdate=utcnow_naive)

    evidence = db.relationship('TrendEvidence', backref='trend', lazy='selectin',
                               cascade='all, delete-orphan')

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None

    def __repr__(self):
        return f'<Trend {self.trend_key}>'


class TrendEvidence(db.Model):
    """One piece of content (article, post) that contributed to a trend."""
    __tablename__ = 'trend_evidence'

    id = db.Column(db.Integer, primary_key=True)
    trend_id = db.Column(db.Integer, db.ForeignKey('trend.id', ondelete='CASCADE'), nullable=False, index=True)
    source_id = db.Column(db.Integer, db.ForeignKey('news_source.id'), nullable=True)
    headline = db.Column(db.String(500))
    url = db.Column(db.String(1000))
    published_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow_naive)

    source = db.relationship('NewsSource', lazy='joined')


class OrganizationProfile(db.Model):
    """
    Declared interests of a subscribing organization.
    Read-only to the engine.
    """
    __tablename__ = 'organization_profile'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    policy_domains = db.Column(db.JSON, default=list)
    focus_areas = db.Column(db.JSON, default=list)  # free-text phrases
    geographies = db.Column(db.JSON, default=list)  # ["US", "CA"]
    sensitivity_flags = db.Column(db.JSON, default=list)
    min_relevance_score = db.Column(db.Integer)  # overrides MIN_SLATE_SCORE when set
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, default=utcnow_naive, onupdate=utcnow_naive)

    watchlist = db.relationship('WatchlistEntity', backref='organization', lazy='selectin')

    def __repr__(self):
        return f'<OrganizationProfile {self.name}>'


class WatchlistEntity(db.Model):
    """A person, organization or bill an organization tracks (or blocks)."""
    __tablename__ = 'watchlist_entity'
    __table_args__ = (
        db.UniqueConstraint('organization_id', 'entity_name', name='uq_watchlist_org_entity'),
    )

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organization_profile.id'), nullable=False, index=True)
    entity_name = db.Column(db.String(200), nullable=False)
    entity_type = db.Column(db.String(30), default='other')  # politician/organization/legislation/other
    rule_type = db.Column(db.String(20), default='track')  # track/block
    created_at = db.Column(db.DateTime, default=utcnow_naive)


class TopicAffinity(db.Model):
    """
    Learned per-organization, per-topic propensity score in [0, 1].

    Created on the first correlated campaign outcome, updated by EMA on each
    later outcome and attenuated by the weekly decay job. Never hard-deleted.
    """
    __tablename__ = 'topic_affinity'
    __table_args__ = (
        db.UniqueConstraint('organization_id', 'topic', name='uq_topic_affinity_org_topic'),
        db.Index('idx_affinity_source_last_used', 'source', 'last_used_at'),
    )

    SOURCE_LEARNED = 'learned_outcome'
    SOURCE_DECLARED = 'self_declared'
    SOURCE_OVERRIDE = 'admin_override'

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organization_profile.id'), nullable=False, index=True)
    topic = db.Column(db.String(200), nullable=False)  # lowercased domain or topic term
    affinity_score = db.Column(db.Float, nullable=False, default=0.5)
    times_used = db.Column(db.Integer, nullable=False, default=0)
    avg_performance = db.Column(db.Float, default=0.0)
    best_performance = db.Column(db.Float, default=0.0)
    last_used_at = db.Column(db.DateTime)
    last_decayed_at = db.Column(db.DateTime)
    source = db.Column(db.String(30), nullable=False, default=SOURCE_LEARNED)
    created_at = db.Column(db.DateTime, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, default=utcnow_naive, onupdate=utcnow_naive)

    def __repr__(self):
        return f'<TopicAffinity org={self.organization_id} {self.topic}={self.affinity_score:.2f}>'


class RelevanceResult(db.Model):
    """
    Cached relevance of one trend for one organization.
    Superseded (replaced, not merged) whenever it is recomputed.
    """
    __tablename__ = 'relevance_result'
    __table_args__ = (
        db.UniqueConstraint('organization_id', 'trend_id', name='uq_relevance_org_trend'),
        db.Index('idx_relevance_org_score', 'organization_id', 'score'),
    )

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organization_profile.id'), nullable=False)
    trend_id = db.Column(db.Integer, db.ForeignKey('trend.id'), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    reasons = db.Column(db.JSON, default=list)
    flags = db.Column(db.JSON, default=list)
    matched_domains = db.Column(db.JSON, default=list)
    matched_watchlist = db.Column(db.JSON, default=list)
    matched_geographies = db.Column(db.JSON, default=list)
    score_breakdown = db.Column(db.JSON, default=dict)
    priority_bucket = db.Column(db.String(10), nullable=False)  # high/medium/low
    computed_at = db.Column(db.DateTime, default=utcnow_naive)

    trend = db.relationship('Trend', lazy='joined')


class FilterLogEntry(db.Model):
    """Append-only record of a trend excluded from an organization's slate."""
    __tablename__ = 'trend_filter_log'
    __table_args__ = (
        db.Index('idx_filter_log_logged_at', 'logged_at'),
        db.Index('idx_filter_log_org', 'organization_id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, nullable=False)
    trend_id = db.Column(db.Integer, nullable=False)
    score = db.Column(db.Integer)
    reason = db.Column(db.String(30), nullable=False)  # below_threshold/blocked/slate_full
    run_id = db.Column(db.Integer, db.ForeignKey('relevance_refresh_run.id'), nullable=True)
    logged_at = db.Column(db.DateTime, default=utcnow_naive)


class Campaign(db.Model):
    """
    An outbound campaign (email, sms, push, social) sent by an organization.
    Topics are extracted upstream; the learning pipeline consumes completed
    campaigns once.
    """
    __tablename__ = 'campaign'
    __table_args__ = (
        db.Index('idx_campaign_org_sent', 'organization_id', 'sent_at'),
        db.Index('idx_campaign_feedback', 'feedback_processed_at'),
    )

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organization_profile.id'), nullable=False)
    campaign_type = db.Column(db.String(20), nullable=False, default='email')
    subject = db.Column(db.String(500))
    status = db.Column(db.String(20), default='draft')  # draft/sent/completed
    sent_at = db.Column(db.DateTime)

    sends = db.Column(db.Integer, default=0)
    opens = db.Column(db.Integer, default=0)
    clicks = db.Column(db.Integer, default=0)
    conversions = db.Column(db.Integer, default=0)
    performance_vs_baseline = db.Column(db.Float)  # percent, e.g. 40.0 = +40%

    extracted_topics = db.Column(db.JSON, default=list)
    policy_domains = db.Column(db.JSON, default=list)

    feedback_processed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow_naive)


class TrendCampaignCorrelation(db.Model):
    """An accepted link between a trend and a campaign that followed it."""
    __tablename__ = 'trend_campaign_correlation'
    __table_args__ = (
        db.UniqueConstraint('trend_id', 'campaign_id', name='uq_correlation_trend_campaign'),
    )

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, nullable=False, index=True)
    trend_id = db.Column(db.Integer, db.ForeignKey('trend.id'), nullable=False)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaign.id'), nullable=False)
    correlation_score = db.Column(db.Float, nullable=False)
    domain_overlap = db.Column(db.JSON, default=list)
    topic_overlap = db.Column(db.JSON, default=list)
    time_delta_hours = db.Column(db.Float)
    campaign_performance = db.Column(db.Float)
    outcome_label = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, default=utcnow_naive)


class PoliticalEntity(db.Model):
    """Knowledge-base entity merged into the reference snapshot."""
    __tablename__ = 'political_entity'

    id = db.Column(db.Integer, primary_key=True)
    canonical_name = db.Column(db.String(200), nullable=False, unique=True)
    entity_type = db.Column(db.String(20), nullable=False)  # politician/organization/legislation/agency
    aliases = db.Column(db.JSON, default=list)
    is_active = db.Column(db.Boolean, default=True)
    updated_at = db.Column(db.DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class RelevanceRefreshRun(db.Model):
    """Audit row for one batch refresh."""
    __tablename__ = 'relevance_refresh_run'

    id = db.Column(db.Integer, primary_key=True)
    reference_version = db.Column(db.String(64))
    status = db.Column(db.String(20), default='running')  # running/completed/partial/failed
    trends_tagged = db.Column(db.Integer, default=0)
    trends_considered = db.Column(db.Integer, default=0)
    organizations_processed = db.Column(db.Integer, default=0)
    organizations_failed = db.Column(db.Integer, default=0)
    failures = db.Column(db.JSON, default=list)  # [{"organization_id": 3, "error": "..."}]
    started_at = db.Column(db.DateTime, default=utcnow_naive)
    finished_at = db.Column(db.DateTime)
