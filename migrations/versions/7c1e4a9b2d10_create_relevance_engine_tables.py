"""Create relevance engine tables

Revision ID: 7c1e4a9b2d10
Revises:
Create Date: 2026-10-19 09:12:41.118204

"""
from alembic import op
import sqlalchemy as sa

revision = '7c1e4a9b2d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'news_source',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('url', sa.String(length=500), nullable=True),
        sa.Column('policy_domains', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'organization_profile',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('policy_domains', sa.JSON(), nullable=True),
        sa.Column('focus_areas', sa.JSON(), nullable=True),
        sa.Column('geographies', sa.JSON(), nullable=True),
        sa.Column('sensitivity_flags', sa.JSON(), nullable=True),
        sa.Column('min_relevance_score', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'political_entity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('canonical_name', sa.String(length=200), nullable=False),
        sa.Column('entity_type', sa.String(length=20), nullable=False),
        sa.Column('aliases', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('canonical_name')
    )

    op.create_table(
        'trend',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('trend_key', sa.String(length=200), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('context_terms', sa.JSON(), nullable=True),
        sa.Column('policy_domains', sa.JSON(), nullable=True),
        sa.Column('geographies', sa.JSON(), nullable=True),
        sa.Column('geo_level', sa.String(length=20), nullable=True),
        sa.Column('politicians_mentioned', sa.JSON(), nullable=True),
        sa.Column('organizations_mentioned', sa.JSON(), nullable=True),
        sa.Column('legislation_mentioned', sa.JSON(), nullable=True),
        sa.Column('evidence_by_domain', sa.JSON(), nullable=True),
        sa.Column('is_breaking', sa.Boolean(), nullable=True),
        sa.Column('velocity', sa.Float(), nullable=True),
        sa.Column('confidence_score', sa.Float(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('tagged_at', sa.DateTime(), nullable=True),
        sa.Column('tagger_version', sa.String(length=64), nullable=True),
        sa.Column('content_hash', sa.String(length=64), nullable=True),
        sa.Column('first_seen_at', sa.DateTime(), nullable=True),
        sa.Column('last_seen_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('trend_key')
    )
    with op.batch_alter_table('trend', schema=None) as batch_op:
        batch_op.create_index('idx_trend_active', ['is_active'], unique=False)
        batch_op.create_index('idx_trend_last_seen', ['last_seen_at'], unique=False)
        batch_op.create_index('idx_trend_confidence', ['confidence_score'], unique=False)

    op.create_table(
        'trend_evidence',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('trend_id', sa.Integer(), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('headline', sa.String(length=500), nullable=True),
        sa.Column('url', sa.String(length=1000), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['trend_id'], ['trend.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['source_id'], ['news_source.id']),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('trend_evidence', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_trend_evidence_trend_id'), ['trend_id'], unique=False)

    op.create_table(
        'watchlist_entity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('entity_name', sa.String(length=200), nullable=False),
        sa.Column('entity_type', sa.String(length=30), nullable=True),
        sa.Column('rule_type', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organization_profile.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'entity_name', name='uq_watchlist_org_entity')
    )
    with op.batch_alter_table('watchlist_entity', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_watchlist_entity_organization_id'), ['organization_id'], unique=False)

    op.create_table(
        'topic_affinity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('topic', sa.String(length=200), nullable=False),
        sa.Column('affinity_score', sa.Float(), nullable=False),
        sa.Column('times_used', sa.Integer(), nullable=False),
        sa.Column('avg_performance', sa.Float(), nullable=True),
        sa.Column('best_performance', sa.Float(), nullable=True),
        sa.Column('last_used_at', sa.DateTime(), nullable=True),
        sa.Column('last_decayed_at', sa.DateTime(), nullable=True),
        sa.Column('source', sa.String(length=30), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organization_profile.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'topic', name='uq_topic_affinity_org_topic')
    )
    with op.batch_alter_table('topic_affinity', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_topic_affinity_organization_id'), ['organization_id'], unique=False)
        batch_op.create_index('idx_affinity_source_last_used', ['source', 'last_used_at'], unique=False)

    op.create_table(
        'campaign',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('campaign_type', sa.String(length=20), nullable=False),
        sa.Column('subject', sa.String(length=500), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('sends', sa.Integer(), nullable=True),
        sa.Column('opens', sa.Integer(), nullable=True),
        sa.Column('clicks', sa.Integer(), nullable=True),
        sa.Column('conversions', sa.Integer(), nullable=True),
        sa.Column('performance_vs_baseline', sa.Float(), nullable=True),
        sa.Column('extracted_topics', sa.JSON(), nullable=True),
        sa.Column('policy_domains', sa.JSON(), nullable=True),
        sa.Column('feedback_processed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organization_profile.id']),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('campaign', schema=None) as batch_op:
        batch_op.create_index('idx_campaign_org_sent', ['organization_id', 'sent_at'], unique=False)
        batch_op.create_index('idx_campaign_feedback', ['feedback_processed_at'], unique=False)

    op.create_table(
        'relevance_result',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('trend_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('reasons', sa.JSON(), nullable=True),
        sa.Column('flags', sa.JSON(), nullable=True),
        sa.Column('matched_domains', sa.JSON(), nullable=True),
        sa.Column('matched_watchlist', sa.JSON(), nullable=True),
        sa.Column('matched_geographies', sa.JSON(), nullable=True),
        sa.Column('score_breakdown', sa.JSON(), nullable=True),
        sa.Column('priority_bucket', sa.String(length=10), nullable=False),
        sa.Column('computed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['organization_id'], ['organization_profile.id']),
        sa.ForeignKeyConstraint(['trend_id'], ['trend.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'trend_id', name='uq_relevance_org_trend')
    )
    with op.batch_alter_table('relevance_result', schema=None) as batch_op:
        batch_op.create_index('idx_relevance_org_score', ['organization_id', 'score'], unique=False)

    op.create_table(
        'relevance_refresh_run',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reference_version', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('trends_tagged', sa.Integer(), nullable=True),
        sa.Column('trends_considered', sa.Integer(), nullable=True),
        sa.Column('organizations_processed', sa.Integer(), nullable=True),
        sa.Column('organizations_failed', sa.Integer(), nullable=True),
        sa.Column('failures', sa.JSON(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('finished_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'trend_filter_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('trend_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('reason', sa.String(length=30), nullable=False),
        sa.Column('run_id', sa.Integer(), nullable=True),
        sa.Column('logged_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['run_id'], ['relevance_refresh_run.id']),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('trend_filter_log', schema=None) as batch_op:
        batch_op.create_index('idx_filter_log_logged_at', ['logged_at'], unique=False)
        batch_op.create_index('idx_filter_log_org', ['organization_id'], unique=False)

    op.create_table(
        'trend_campaign_correlation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('trend_id', sa.Integer(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), nullable=False),
        sa.Column('correlation_score', sa.Float(), nullable=False),
        sa.Column('domain_overlap', sa.JSON(), nullable=True),
        sa.Column('topic_overlap', sa.JSON(), nullable=True),
        sa.Column('time_delta_hours', sa.Float(), nullable=True),
        sa.Column('campaign_performance', sa.Float(), nullable=True),
        sa.Column('outcome_label', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['trend_id'], ['trend.id']),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaign.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('trend_id', 'campaign_id', name='uq_correlation_trend_campaign')
    )
    with op.batch_alter_table('trend_campaign_correlation', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_trend_campaign_correlation_organization_id'), ['organization_id'], unique=False)


def downgrade():
    op.drop_table('trend_campaign_correlation')
    op.drop_table('trend_filter_log')
    op.drop_table('relevance_refresh_run')
    op.drop_table('relevance_result')
    op.drop_table('campaign')
    op.drop_table('topic_affinity')
    op.drop_table('watchlist_entity')
    op.drop_table('trend_evidence')
    op.drop_table('trend')
    op.drop_table('political_entity')
    op.drop_table('organization_profile')
    op.drop_table('news_source')
