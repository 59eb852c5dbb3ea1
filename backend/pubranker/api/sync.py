from flask import Blueprint, current_app, jsonify

sync = Blueprint('sync', __name__)


def _monitor():
    return current_app.extensions['sync_monitor']


@sync.route('/status', methods=['GET'])
def status():
    return jsonify(_monitor().probe().to_dict())


@sync.route('/diagnostics', methods=['GET'])
def diagnostics():
    return jsonify(_monitor().diagnostics())


@sync.route('/<string:mode>', methods=['POST'])
def run_sync(mode):
    monitor = _monitor()
    actions = {
        'full': monitor.full_sync,
        'push': monitor.push,
        'pull': monitor.pull,
    }
    if mode not in actions:
        return jsonify({'error': f'Unknown sync mode: {mode}'}), 400
    result = actions[mode]()
    code = 200 if result.state == 'success' else 500
    return jsonify(result.to_dict()), code
