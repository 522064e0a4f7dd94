
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('owned_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_restaurants_owned_by', 'restaurants', ['owned_by'])

    op.create_table(
        'tables',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('table_number', sa.Integer(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.UniqueConstraint('restaurant_id', 'table_number', name='uq_table_restaurant_number'),
        sa.CheckConstraint('capacity > 0', name='ck_table_capacity_positive'),
    )
    op.create_index('ix_tables_restaurant_id', 'tables', ['restaurant_id'])

    op.create_table(
        'meals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
    )
    op.create_index('ix_meals_restaurant_id', 'meals', ['restaurant_id'])

    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('table_id', sa.Integer(), sa.ForeignKey('tables.id'), nullable=False),
        sa.Column('meal_id', sa.Integer(), sa.ForeignKey('meals.id'), nullable=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.Time(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('reserved', 'canceled', 'completed')", name='ck_reservation_status'),
    )
    op.create_index('ix_reservations_user_id', 'reservations', ['user_id'])
    op.create_index('ix_reservations_table_id', 'reservations', ['table_id'])
    op.create_index('ix_reservations_restaurant_id', 'reservations', ['restaurant_id'])
    op.create_index(
        'uq_reservation_active_slot', 'reservations', ['table_id', 'date', 'time'],
        unique=True,
        postgresql_where=sa.text("status = 'reserved'"),
        sqlite_where=sa.text("status = 'reserved'"),
    )

def downgrade():
    op.drop_index('uq_reservation_active_slot', table_name='reservations')
    op.drop_index('ix_reservations_restaurant_id', table_name='reservations')
    op.drop_index('ix_reservations_table_id', table_name='reservations')
    op.drop_index('ix_reservations_user_id', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('ix_meals_restaurant_id', table_name='meals')
    op.drop_table('meals')
    op.drop_index('ix_tables_restaurant_id', table_name='tables')
    op.drop_table('tables')
    op.drop_index('ix_restaurants_owned_by', table_name='restaurants')
    op.drop_table('restaurants')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
