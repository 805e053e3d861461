# -*- coding: utf-8 -*-
"""
DER Web Application - Flask Backend
"""
import io
import os

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS

from sql_dump_der.app_config import config
from sql_dump_der.der import build_er_model, extract_statements, render_documents
from sql_dump_der.der.doc_generator import generate_docx, generate_html

app = Flask(__name__)
CORS(app)
app.secret_key = config.SECRET_KEY
app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH


def _read_sql():
    """SQL text of a JSON object request, or None when missing or not a string"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}, None
    sql = data.get('sql')
    if not isinstance(sql, str) or not sql.strip():
        return data, None
    return data, sql


def _parse_or_error(sql):
    schema, message = build_er_model(sql)
    if message:
        return None, (jsonify({
            'error': 'No valid CREATE TABLE statement found. Make sure the SQL contains table definitions.',
            'details': message
        }), 400)
    return schema, None


@app.route('/api/parse_sql', methods=['POST'])
def api_parse_sql():
    """Parse SQL and return the tables and relationships"""
    try:
        _, sql = _read_sql()
        if sql is None:
            return jsonify({'error': 'Please provide the SQL to parse'}), 400

        schema, error = _parse_or_error(sql)
        if error:
            return error

        return jsonify(schema.to_dict())

    except Exception as e:
        app.logger.error(f"Error while parsing SQL: {e}")
        return jsonify({'error': f'Parsing failed: {str(e)}'}), 500


@app.route('/api/generate_der', methods=['POST'])
def api_generate_der():
    """Render the Mermaid DER documents"""
    try:
        data, sql = _read_sql()
        if sql is None:
            return jsonify({'error': 'Please provide the SQL to parse'}), 400

        schema, error = _parse_or_error(sql)
        if error:
            return error

        documents = render_documents(
            schema,
            base_name=data.get('name') or 'database_der',
            source_name=data.get('source') or 'web',
            **config.get_render_config()
        )
        return jsonify({
            'documents': [{'filename': doc.filename, 'content': doc.content} for doc in documents]
        })

    except Exception as e:
        app.logger.error(f"Error while generating DER: {e}")
        return jsonify({'error': f'DER generation failed: {str(e)}'}), 500


@app.route('/api/generate_doc', methods=['POST'])
def api_generate_doc():
    """Schema documentation as HTML or Word"""
    try:
        data, sql = _read_sql()
        if sql is None:
            return jsonify({'error': 'Please provide the SQL to parse'}), 400
        output_format = data.get('format', 'html')

        schema, error = _parse_or_error(sql)
        if error:
            return error

        if output_format == 'html':
            return jsonify({'html': generate_html(schema)})

        elif output_format == 'docx':
            buffer = io.BytesIO()
            generate_docx(schema, buffer)
            buffer.seek(0)

            return send_file(
                buffer,
                as_attachment=True,
                download_name='database_schema.docx',
                mimetype='application/vnd.openxmlformats-officedocument.wordprocessingml.document'
            )

        else:
            return jsonify({'error': 'Invalid format, use "html" or "docx"'}), 400

    except Exception as e:
        app.logger.error(f"Error while generating documentation: {e}")
        return jsonify({'error': f'Documentation generation failed: {str(e)}'}), 500


@app.route('/api/extract', methods=['POST'])
def api_extract():
    """Statements of the dump grouped by kind, unparsed"""
    try:
        _, sql = _read_sql()
        if sql is None:
            return jsonify({'error': 'Please provide the SQL to parse'}), 400

        return jsonify({'statements': extract_statements(sql)})

    except Exception as e:
        app.logger.error(f"Error while extracting statements: {e}")
        return jsonify({'error': f'Extraction failed: {str(e)}'}), 500


if __name__ == '__main__':
    app.run(host=os.getenv('HOST', '127.0.0.1'), port=int(os.getenv('PORT', '5000')), debug=config.DEBUG)
