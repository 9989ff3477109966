# auth/routes.py
"""
Sign-in for the subscribe flow.

Pricing links straight to /subscribe?tier=..., which sends anonymous visitors
home; the sign-in/sign-up forms carry that URL in ?next= so a user lands back
on checkout for the tier they picked.
"""
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy.exc import IntegrityError

from app import db
from models import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_CHARS = 8
MIN_USERNAME_CHARS = 3


def _next_target() -> Optional[str]:
    """Same-host ?next= / form next, or None."""
    raw = (request.values.get("next") or "").strip()
    if not raw:
        return None
    host = urlparse(request.host_url)
    target = urlparse(urljoin(request.host_url, raw))
    if target.scheme not in ("http", "https") or target.netloc != host.netloc:
        return None
    return raw


def _land():
    return redirect(_next_target() or url_for("pricing"))


def _signup_errors(username: str, email: str, password: str) -> List[str]:
    problems = []
    if len(username) < MIN_USERNAME_CHARS:
        problems.append(f"Pick a username with at least {MIN_USERNAME_CHARS} characters.")
    if email.count("@") != 1 or "." not in email.rsplit("@", 1)[-1]:
        problems.append("That email address doesn't look right.")
    if len(password) < MIN_PASSWORD_CHARS:
        problems.append(f"Passwords need at least {MIN_PASSWORD_CHARS} characters.")
    if not problems and User.query.filter(
        (User.username == username) | (User.email == email)
    ).first():
        problems.append("An account with that username or email already exists.")
    return problems


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return _land()
    if request.method == "GET":
        return render_template("login.html", next_url=_next_target())

    ident = (request.form.get("username_or_email") or "").strip()
    user = User.query.filter(
        (User.username == ident) | (User.email == ident.lower())
    ).first()
    if user is None or not user.check_password(request.form.get("password") or ""):
        flash("Wrong username/email or password.", "danger")
        return render_template("login.html", next_url=_next_target()), 401

    login_user(user, remember=True)
    return _land()


@auth_bp.route("/register", methods=["GET", "POST"])
def register():
    if current_user.is_authenticated:
        return _land()
    if request.method == "GET":
        return render_template("register.html", next_url=_next_target())

    username = (request.form.get("username") or "").strip()
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""

    problems = _signup_errors(username, email, password)
    if not problems:
        user = User(username=username, email=email)
        user.set_password(password)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # lost a race with a concurrent sign-up
            db.session.rollback()
            problems = ["An account with that username or email already exists."]
    if problems:
        for p in problems:
            flash(p, "danger")
        return render_template("register.html", next_url=_next_target()), 400

    login_user(user, remember=True)
    flash("Welcome aboard! Pick a plan to start generating.", "success")
    return _land()


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return redirect(url_for("index"))
