"""
Capture Forms
CSRF-protected form shown in the modal after a map click
"""
import math

from flask_wtf import FlaskForm
from wtforms import FloatField, SelectField, SelectMultipleField, SubmitField, widgets
from wtforms.validators import InputRequired, NumberRange, ValidationError

from models.value_records import Source, Service


SOURCE_CHOICES = [(s.value, s.value) for s in Source]
SERVICE_CHOICES = [(s.value, s.value) for s in Service]


class Finite:
    """Rejects inf and nan, which FloatField accepts ('1e400' parses to inf)"""

    def __init__(self, message=None):
        self.message = message or 'Must be a finite number'

    def __call__(self, form, field):
        if field.data is not None and not math.isfinite(field.data):
            raise ValidationError(self.message)


class MultiCheckboxField(SelectMultipleField):
    """Multiple-select rendered as a list of checkboxes"""
    widget = widgets.ListWidget(prefix_label=False)
    option_widget = widgets.CheckboxInput()


class CaptureForm(FlaskForm):
    """Land value attributes for the clicked point"""
    value = FloatField('Value', validators=[
        InputRequired(message='Value is required'),
        Finite(message='Value must be a finite number'),
        NumberRange(min=0, message='Value cannot be negative')
    ])
    source = SelectField('Source', choices=SOURCE_CHOICES, default=Source.NONE.value)
    services = MultiCheckboxField('Services', choices=SERVICE_CHOICES, default=[])
    surface_area = FloatField('Surface (m²)', validators=[
        InputRequired(message='Surface area is required'),
        Finite(message='Surface area must be a finite number'),
        NumberRange(min=0, message='Surface area cannot be negative')
    ])
    submit = SubmitField('Save')
