"""
Flask-Admin panel for the Land Value Map
Accessible at /admin - a read-only browser/exporter for captured records.
The application itself never edits or deletes records.
"""
from flask_admin import Admin
from flask_admin.contrib.sqla import ModelView
from flask_admin.theme import Bootstrap4Theme


class ReadOnlyModelView(ModelView):
    """Read-only model view"""

    can_create = False
    can_edit = False
    can_delete = False
    can_export = True
    page_size = 50
    column_display_pk = True

    def __init__(self, model, session, **kwargs):
        # Prefix endpoints with 'admin_' to avoid clashing with app blueprints
        if 'endpoint' not in kwargs:
            kwargs['endpoint'] = f'admin_{model.__name__.lower()}'
        super().__init__(model, session, **kwargs)


class ValueRecordAdminView(ReadOnlyModelView):
    column_list = [
        'id', 'capture_date', 'latitude', 'longitude',
        'value', 'surface_area', 'source', 'services',
    ]
    column_searchable_list = ['source', 'services']
    column_filters = ['capture_date', 'source']
    column_default_sort = ('capture_date', True)
    column_export_list = column_list


def init_admin(app, db):
    """Create the Flask-Admin instance and register the records view."""

    admin = Admin(
        app,
        name='Land Value Map',
        theme=Bootstrap4Theme(),
        url='/admin',
    )

    from models.value_records import ValueRecord

    admin.add_view(ValueRecordAdminView(ValueRecord, db, name='Value Records'))

    return admin
