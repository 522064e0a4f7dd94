import random
from decimal import Decimal
import click
from flask import Flask, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from .extensions import db, migrate
from .config import Config
from .http import register_error_handlers
from .auth import issue_token
from .blueprints.reservations import bp as reservations_bp
from .models import User, Restaurant, Table, Meal, Reservation

def create_app(config: object = Config):
    app = Flask(__name__)
    app.config.from_object(config)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)

    register_error_handlers(app)
    app.register_blueprint(reservations_bp, url_prefix="/api/reservations")

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    @click.command("seed")
    @with_appcontext
    def seed_command():
        """Creates sample users, restaurants, tables and meals."""
        db.session.query(Reservation).delete()
        db.session.query(Meal).delete()
        db.session.query(Table).delete()
        db.session.query(Restaurant).delete()
        db.session.query(User).delete()
        db.session.commit()
        print("Cleared existing data.")

        users = [User(name=f"User {i+1}", email=f"user{i+1}@example.com") for i in range(5)]
        db.session.add_all(users)
        db.session.flush()

        dishes = ["Risotto", "Ribeye", "Sea Bass", "Tasting Menu", "Gnocchi"]
        for i, owner in enumerate(users[:2]):
            restaurant = Restaurant(name=f"Restaurant {i+1}", address=f"{i+1} Main Street", owned_by=owner.id)
            db.session.add(restaurant)
            db.session.flush()
            for number in range(1, 7):
                db.session.add(Table(restaurant_id=restaurant.id, table_number=number, capacity=random.choice([2, 4, 6])))
            for name in random.sample(dishes, 3):
                db.session.add(Meal(restaurant_id=restaurant.id, name=name, price=Decimal(random.randint(18, 60))))
        db.session.commit()
        print("Database seeded!")

        for user in users:
            print(f"{user.id}\t{user.email}\t{issue_token(user.id)}")

    @click.command("issue-token")
    @click.argument("user_id", type=int)
    @with_appcontext
    def issue_token_command(user_id):
        """Prints a bearer token for an existing user."""
        if db.session.get(User, user_id) is None:
            raise click.ClickException(f"No user with id {user_id}.")
        print(issue_token(user_id))

    app.cli.add_command(seed_command)
    app.cli.add_command(issue_token_command)

    return app
