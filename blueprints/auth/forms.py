"""
Authentication forms using Flask-WTF.
Forms are filled from JSON request bodies.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, Length


class LoginForm(FlaskForm):
    """Login form with email and password."""

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email format')
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])


class RegisterForm(FlaskForm):
    """Self-service member registration."""

    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(max=200)
    ])

    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Invalid email format'),
        Length(max=254)
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        Length(min=8, message='Password must be at least 8 characters')
    ])
