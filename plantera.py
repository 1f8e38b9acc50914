#!/usr/bin/env python3
"""
plantera.py — Flask Plant Care Tracker
"""
from flask import (
    Flask,
    render_template_string,
    request,
    redirect,
    url_for,
    jsonify,
    abort,
)
import logging
import os
from datetime import datetime

from care_dates import format_timestamp, parse_form_date, UNKNOWN
from plant_list import IntakeForm, PlantList
from plant_store import CARE_FIELDS, PlantRecord, build_store, build_uploader


def env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 4 * 1024 * 1024  # 4 MB
app.config.update(
    AWS_REGION=os.environ.get("AWS_REGION"),
    AWS_ACCESS_KEY_ID=os.environ.get("AWS_ACCESS_KEY_ID"),
    AWS_SECRET_ACCESS_KEY=os.environ.get("AWS_SECRET_ACCESS_KEY"),
    PLANTS_TABLE=os.environ.get("PLANTS_TABLE", "plants"),
    PLANT_IMAGE_BUCKET=os.environ.get("PLANT_IMAGE_BUCKET", "plantera-images"),
    PLANT_IMAGE_BASE_URL=os.environ.get("PLANT_IMAGE_BASE_URL"),
    PLANTERA_SORT_BY_WATERED=env_flag("PLANTERA_SORT_BY_WATERED", True),
    PLANTERA_RECONCILE_AFTER_CARE=env_flag("PLANTERA_RECONCILE_AFTER_CARE"),
    PLANTERA_UNKNOWN_TIER=env_flag("PLANTERA_UNKNOWN_TIER"),
)

CARE_LABELS = {"watered": "Water", "repotted": "Repot", "fertilized": "Fertilize"}
TEXT_FIELDS = ("name", "image_url", "watered", "repotted", "fertilized")


def get_state():
    state = app.extensions.get("plantera")
    if state is None:
        plant_list = PlantList(
            build_store(app.config),
            sort_by_watered=app.config["PLANTERA_SORT_BY_WATERED"],
            reconcile_after_care=app.config["PLANTERA_RECONCILE_AFTER_CARE"],
        )
        # one draft for the whole server, shared by every browser tab
        form = IntakeForm(plant_list, build_uploader(app.config))
        state = app.extensions["plantera"] = {"plant_list": plant_list, "intake_form": form}
    return state


def get_plant_list():
    return get_state()["plant_list"]


def get_intake_form():
    return get_state()["intake_form"]


def row_json(row):
    p = row.plant.as_dict()
    p["watered_days_ago"] = row.watered_days
    p["watered_tier"] = row.watered_tier
    p["repotted_days_ago"] = row.repotted_days
    p["fertilized_days_ago"] = row.fertilized_days
    return p


BASE_HTML = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1"/>
<title>Plantera</title>
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@300;600;800&display=swap" rel="stylesheet">
<style>
:root{
  --bg:#f3f7f1;
  --card:#ffffff;
  --muted:#5b6b57;
  --accent:#5aa469;
  --fresh:#2f9e44;
  --warning:#d4a017;
  --overdue:#d9534f;
  font-family: Inter, system-ui, -apple-system, "Segoe UI", Roboto, "Helvetica Neue", Arial;
}
*{box-sizing:border-box}
body{margin:0;background:var(--bg);color:#222;padding:28px}
.header{display:flex;flex-direction:column;align-items:center;gap:14px;margin-bottom:20px}
.title{display:flex;align-items:center;gap:8px}
h1{margin:0;font-size:26px}
.btn{background:transparent;border:1px solid rgba(0,0,0,0.08);padding:8px 12px;border-radius:10px;cursor:pointer;font-weight:700;text-decoration:none;color:inherit}
.btn.primary{background:var(--accent);color:white;border:none}
.grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(260px,1fr));gap:16px;max-width:1100px;margin:0 auto}
.plant-card{background:var(--card);border-radius:12px;padding:14px;box-shadow:0 6px 20px rgba(0,0,0,0.05)}
.plant-card img{width:100%;height:auto;border-radius:8px;margin-bottom:10px}
.plant-name{font-weight:800;font-size:18px;margin-bottom:6px}
.care{margin:4px 0;font-size:14px}
.fresh{color:var(--fresh)}
.warning{color:var(--warning)}
.overdue{color:var(--overdue)}
.unknown{color:var(--muted)}
.actions{display:flex;gap:6px;margin-top:10px}
.actions form{margin:0}
.small{font-size:12px;color:var(--muted)}
.overlay{position:fixed;inset:0;background:rgba(0,0,0,0.5);display:flex;align-items:center;justify-content:center}
.modal{background:var(--card);width:380px;padding:24px;border-radius:12px;position:relative}
.modal .close{position:absolute;top:10px;right:12px;border:none;background:none;font-size:20px;cursor:pointer}
label.small{display:block;margin:10px 0 4px}
input{width:100%;padding:8px;border-radius:8px;border:1px solid rgba(0,0,0,0.1);font-size:14px}
.footer{margin-top:18px;color:var(--muted);font-size:13px;text-align:center}
</style>
</head>
<body>
<div class="header">
  <div class="title"><h1>Plantera</h1></div>
  <div style="display:flex;gap:8px">
    <a class="btn primary" href="{{ url_for('index', add=1) }}">Add Plant</a>
    <a class="btn" href="{{ url_for('index', refresh=1) }}">Refresh</a>
  </div>
</div>

<div class="grid">
  {% for row in rows %}
    {% set p = row.plant %}
    <div class="plant-card">
      <img src="{{ p.image_url }}" alt="{{ p.name }}">
      <div class="plant-name">{{ p.name }}</div>
      <p class="care {{ row.watered_tier }}">
        {% if row.watered_tier == unknown %}Never watered{% else %}Watered {{ row.watered_days }} days ago{% endif %}
      </p>
      <p class="care">Repotted {{ row.repotted_days }} days ago</p>
      <p class="care">Fertilized {{ row.fertilized_days }} days ago</p>
      <div class="actions">
        {% for field, label in care_labels.items() %}
          <form method="post" action="{{ url_for('mark_care', field=field, name=p.name) }}">
            <button class="btn" type="submit">{{ label }}</button>
          </form>
        {% endfor %}
      </div>
    </div>
  {% else %}
    <div class="small">No plants yet — add one with the button above.</div>
  {% endfor %}
</div>

{% if form.is_open %}
  <div class="overlay" id="overlay">
    <div class="modal" id="modal">
      <form method="post" action="{{ url_for('dismiss_plant') }}" style="margin:0">
        <button class="close" type="submit" aria-label="Close">&times;</button>
      </form>
      <h2 style="margin-top:0">Add New Plant</h2>
      <form method="post" action="{{ url_for('create_plant') }}" enctype="multipart/form-data">
        <label class="small">Name</label>
        <input name="name" value="{{ form.draft.name }}" required>
        <label class="small">Watered</label>
        <input name="watered" type="date" value="{{ form.draft.form_value('watered') }}">
        <label class="small">Repotted</label>
        <input name="repotted" type="date" value="{{ form.draft.form_value('repotted') }}">
        <label class="small">Fertilized</label>
        <input name="fertilized" type="date" value="{{ form.draft.form_value('fertilized') }}">
        <label class="small">Image</label>
        <input name="image" type="file" accept="image/*">
        <label class="small">or image URL</label>
        <input name="image_url" value="{{ form.draft.image_url }}">
        <div style="margin-top:14px">
          <button class="btn primary" type="submit">Submit</button>
        </div>
      </form>
      <form method="post" action="{{ url_for('dismiss_plant') }}" id="dismissForm"></form>
    </div>
  </div>
  <script>
  document.getElementById("overlay").addEventListener("mousedown", function(e){
    if(!document.getElementById("modal").contains(e.target)){
      document.getElementById("dismissForm").submit();
    }
  });
  </script>
{% endif %}

<div class="footer">Updated: {{ now }}</div>
</body>
</html>
"""


def render_index():
    rows = get_plant_list().rows(explicit_unknown=app.config["PLANTERA_UNKNOWN_TIER"])
    return render_template_string(
        BASE_HTML,
        rows=rows,
        form=get_intake_form(),
        care_labels=CARE_LABELS,
        unknown=UNKNOWN,
        now=datetime.now().strftime("%b %d, %Y %H:%M"),
    )


@app.route("/")
def index():
    plants = get_plant_list()
    if not plants.loaded or request.args.get("refresh"):
        plants.load()
    if request.args.get("add"):
        get_intake_form().open()
    return render_index()


@app.route("/plants", methods=["POST"])
def create_plant():
    form = get_intake_form()
    form.open()
    previous = form.draft
    form.draft = IntakeForm.draft_from_form(request.form, request.files)
    if form.draft.image is None and previous.image is not None:
        # a file chosen on a failed attempt is not re-sent by the browser
        form.draft.image = previous.image
    if form.submit():
        return redirect(url_for("index"))
    app.logger.warning("Plant %r was not added; keeping the form open", form.draft.name)
    return render_index()


@app.route("/plants/dismiss", methods=["POST"])
def dismiss_plant():
    get_intake_form().dismiss()
    return redirect(url_for("index"))


@app.route("/care/<field>/<path:name>", methods=["POST"])
def mark_care(field, name):
    if field not in CARE_FIELDS:
        abort(404)
    if not get_plant_list().mark_care_event(name, field):
        app.logger.warning("%s for %r did not apply", field, name)
    return redirect(url_for("index"))


@app.route("/api/plants", methods=["GET", "POST"])
def api_plants():
    plants = get_plant_list()
    if request.method == "GET":
        if not plants.loaded or request.args.get("refresh"):
            plants.load()
        rows = plants.rows(explicit_unknown=app.config["PLANTERA_UNKNOWN_TIER"])
        return jsonify([row_json(r) for r in rows])
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "expected a JSON object"}), 400
    bad = [k for k in TEXT_FIELDS if data.get(k) is not None and not isinstance(data[k], str)]
    if bad:
        return jsonify({"error": f"must be strings: {', '.join(bad)}"}), 400
    name = (data.get("name") or "").strip()
    if not name:
        return jsonify({"error": "name required"}), 400
    record = PlantRecord(
        name=name,
        image_url=data.get("image_url") or "",
        watered=format_timestamp(parse_form_date(data.get("watered"))),
        repotted=format_timestamp(parse_form_date(data.get("repotted"))),
        fertilized=format_timestamp(parse_form_date(data.get("fertilized"))),
    )
    if not plants.store.insert(record):
        return jsonify({"error": "store rejected the write"}), 502
    plants.load()
    return jsonify(record.as_dict()), 201


@app.route("/api/plants/<path:name>/<field>", methods=["POST"])
def api_mark_care(name, field):
    plants = get_plant_list()
    if field not in CARE_FIELDS:
        return jsonify({"error": "unknown care field"}), 404
    if not plants.loaded:
        plants.load()
    if plants.get(name) is None:
        return jsonify({"error": "not found"}), 404
    if not plants.mark_care_event(name, field):
        return jsonify({"error": "store rejected the write"}), 502
    record = plants.get(name)
    return jsonify(record.as_dict() if record else {"name": name})


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5019)), debug=True)
