from flask import Flask, jsonify, request
from keysmith.config import load_config, make_sampler, max_attempts, weakness_policy
from keysmith.errors import GenerationExhausted, MalformedRequirements, RandomSourceUnavailable
from keysmith.evaluator import assess_password
from keysmith.generator import generate_password
from keysmith.requirements import PasswordClass, default_grouping_for

app = Flask(__name__)

def _password_class(value):
    try:
        return PasswordClass.parse(value)
    except ValueError:
        return None

@app.route('/')
def home():
    return jsonify({
        "message": "keysmith API is running"
    })

@app.route('/generate', methods=['POST'])
def generate_route():
    data = request.get_json(silent=True) or {}
    cfg = load_config()
    password_class = _password_class(data.get('type', cfg.get('default_type', 'generic')))
    if password_class is None:
        return jsonify({'error': f"unknown password type: {data.get('type')!r}"}), 404
    try:
        password = generate_password(
            password_class,
            data.get('requirements'),
            sampler=make_sampler(cfg),
            policy=weakness_policy(cfg),
            max_attempts=max_attempts(cfg),
        )
    except MalformedRequirements as e:
        return jsonify({'error': e.reason, 'field': e.field}), 400
    except GenerationExhausted as e:
        return jsonify({'error': str(e), 'attempts': e.attempts}), 422
    except RandomSourceUnavailable as e:
        return jsonify({'error': str(e)}), 503
    return jsonify({'password': password})

@app.route('/weak', methods=['POST'])
def weak_route():
    data = request.get_json(silent=True) or {}
    password = data.get('password')
    if not isinstance(password, str):
        return jsonify({'error': "'password' must be a string"}), 400
    result = assess_password(password, weakness_policy(load_config()))
    return jsonify(result)

@app.route('/defaults/<type_name>')
def defaults_route(type_name):
    password_class = _password_class(type_name)
    if password_class is None:
        return jsonify({'error': f"unknown password type: {type_name!r}"}), 404
    grouping = default_grouping_for(password_class)
    return jsonify({
        'type': password_class.value,
        'group_size': grouping.group_size,
        'number_of_groups': grouping.number_of_groups,
        'separator': grouping.separator,
    })

if __name__ == "__main__":
    app.run(debug=True)
