"""initial_annotation_schema

Revision ID: 7c1d2e3f4a5b
Revises:
Create Date: 2026-10-17 10:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7c1d2e3f4a5b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONArray = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # 1. Samples (one row per metagenome job)
    op.create_table(
        'samples',
        sa.Column('job_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('metagenome_id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('public', sa.Boolean(), nullable=False),
        sa.Column('viewable', sa.Boolean(), nullable=False),
        sa.Column('owner', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('job_id', name=op.f('pk_samples')),
    )
    op.create_index(op.f('ix_samples_metagenome_id'), 'samples', ['metagenome_id'], unique=True)
    op.create_index(op.f('ix_samples_owner'), 'samples', ['owner'], unique=False)

    # 2. md5 surrogate keys and per-job similarity summaries
    op.create_table(
        'md5s',
        sa.Column('md5_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('md5', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('md5_id', name=op.f('pk_md5s')),
    )
    op.create_index(op.f('ix_md5s_md5'), 'md5s', ['md5'], unique=True)

    op.create_table(
        'job_md5s',
        sa.Column('row_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('md5_id', sa.Integer(), nullable=False),
        sa.Column('abundance', sa.Integer(), nullable=False),
        sa.Column('exp_avg', sa.Float(), nullable=True),
        sa.Column('ident_avg', sa.Float(), nullable=True),
        sa.Column('len_avg', sa.Float(), nullable=True),
        sa.Column('seek', sa.BigInteger(), nullable=True),
        sa.Column('length', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['job_id'], ['samples.job_id'], name=op.f('fk_job_md5s_job_id_samples')),
        sa.ForeignKeyConstraint(['md5_id'], ['md5s.md5_id'], name=op.f('fk_job_md5s_md5_id_md5s')),
        sa.PrimaryKeyConstraint('row_id', name=op.f('pk_job_md5s')),
    )
    op.create_index(op.f('ix_job_md5s_job_id'), 'job_md5s', ['job_id'], unique=False)
    op.create_index(op.f('ix_job_md5s_md5_id'), 'job_md5s', ['md5_id'], unique=False)
    op.create_index('ix_job_md5s_version_job_seek', 'job_md5s', ['version', 'job_id', 'seek'], unique=False)

    # 3. M5NR annotation store
    op.create_table(
        'md5_annotations',
        sa.Column('annotation_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('md5', sa.String(length=32), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=False),
        sa.Column('accession', JSONArray, nullable=False),
        sa.Column('function', JSONArray, nullable=False),
        sa.Column('organism', JSONArray, nullable=False),
        sa.PrimaryKeyConstraint('annotation_id', name=op.f('pk_md5_annotations')),
        sa.UniqueConstraint('md5', 'source', name='uq_md5_annotations_md5_source'),
    )
    op.create_index(op.f('ix_md5_annotations_md5'), 'md5_annotations', ['md5'], unique=False)
    op.create_index(op.f('ix_md5_annotations_source'), 'md5_annotations', ['source'], unique=False)

    op.create_table(
        'taxa',
        sa.Column('taxon_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=300), nullable=False),
        sa.Column('domain', sa.String(length=200), nullable=True),
        sa.Column('phylum', sa.String(length=200), nullable=True),
        sa.Column('class', sa.String(length=200), nullable=True),
        sa.Column('order', sa.String(length=200), nullable=True),
        sa.Column('family', sa.String(length=200), nullable=True),
        sa.Column('genus', sa.String(length=200), nullable=True),
        sa.Column('species', sa.String(length=300), nullable=True),
        sa.Column('strain', sa.String(length=300), nullable=True),
        sa.PrimaryKeyConstraint('taxon_id', name=op.f('pk_taxa')),
    )
    op.create_index(op.f('ix_taxa_name'), 'taxa', ['name'], unique=True)

    op.create_table(
        'ontology_terms',
        sa.Column('term_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('source', sa.String(length=50), nullable=False),
        sa.Column('accession', sa.String(length=100), nullable=False),
        sa.Column('level1', sa.String(length=300), nullable=True),
        sa.Column('level2', sa.String(length=300), nullable=True),
        sa.Column('level3', sa.String(length=300), nullable=True),
        sa.Column('function', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('term_id', name=op.f('pk_ontology_terms')),
        sa.UniqueConstraint('source', 'accession', name='uq_ontology_terms_source_accession'),
    )
    op.create_index(op.f('ix_ontology_terms_source'), 'ontology_terms', ['source'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_ontology_terms_source'), table_name='ontology_terms')
    op.drop_table('ontology_terms')
    op.drop_index(op.f('ix_taxa_name'), table_name='taxa')
    op.drop_table('taxa')
    op.drop_index(op.f('ix_md5_annotations_source'), table_name='md5_annotations')
    op.drop_index(op.f('ix_md5_annotations_md5'), table_name='md5_annotations')
    op.drop_table('md5_annotations')
    op.drop_index('ix_job_md5s_version_job_seek', table_name='job_md5s')
    op.drop_index(op.f('ix_job_md5s_md5_id'), table_name='job_md5s')
    op.drop_index(op.f('ix_job_md5s_job_id'), table_name='job_md5s')
    op.drop_table('job_md5s')
    op.drop_index(op.f('ix_md5s_md5'), table_name='md5s')
    op.drop_table('md5s')
    op.drop_index(op.f('ix_samples_owner'), table_name='samples')
    op.drop_index(op.f('ix_samples_metagenome_id'), table_name='samples')
    op.drop_table('samples')
