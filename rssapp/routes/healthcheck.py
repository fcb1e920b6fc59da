"""
Healthcheck route.

Reports availability along with the running environment and version.
"""

from flask import Blueprint, current_app

from rssapp.routes.helpers import HealthEnvelope, SystemInfo, write_json

healthcheck_bp = Blueprint('healthcheck', __name__, url_prefix='/v1')


@healthcheck_bp.route('/healthcheck', methods=['GET'])
def healthcheck():
    from rssapp import __version__

    return write_json(HealthEnvelope(
        status='available',
        system_info=SystemInfo(
            environment=current_app.config['ENV_NAME'],
            version=__version__,
        ),
    ))
