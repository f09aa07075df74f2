# app.py
import logging
import math

import matplotlib.pyplot as plt
import numpy as np
# --- Interactive Plotly Depth of Field visualization ---
import plotly.graph_objects as go
import streamlit as st

import settings
from catalog import load_catalog
from display import (INFINITY_SYMBOL, clamp_focus_distance, describe_in_focus_range,
                     format_distance, format_footprint, format_gsd, gsd_quality,
                     meters_to_feet, parse_distance_input)
from logging_config import setup_logging
from optics import InvalidConfigurationError, circle_of_confusion, dof_curves
from pipeline import CaptureRecord, SubjectDimensions, plan_capture
from presets import PresetError, build_preset, clamp_params, parse_preset, preset_to_json

setup_logging(getattr(logging, settings.LOG_LEVEL), settings.LOG_FILE)
logger = logging.getLogger(__name__)


@st.cache_resource
def get_catalog(path):
    return load_catalog(path)


st.set_page_config(page_title="DOF & Photogrammetry Planner", layout="centered")

catalog = get_catalog(settings.CATALOG_PATH)

st.title("📷 Depth of Field & Capture Planner")
st.markdown("""
Pick a camera and lens, set aperture and focus distance to get the **near/far limits**,
field of view and ground sample distance, then plan how many overlapping images
a photogrammetry capture needs.
""")

# session defaults so presets can read/write them
_defaults = {
    "aperture": settings.DEFAULT_APERTURE,
    "focus_m": settings.DEFAULT_FOCUS_M,
    "unit": settings.DISTANCE_UNIT,
    "surface_width_m": 10.0,
    "surface_height_m": 10.0,
    "surface_depth_m": 0.0,
    "horizontal_overlap": settings.DEFAULT_OVERLAP_PCT,
    "vertical_overlap": settings.DEFAULT_OVERLAP_PCT,
}
for key, value in _defaults.items():
    if key not in st.session_state:
        st.session_state[key] = value

# Numeric widgets below only accept these ranges
_WIDGET_LIMITS = {
    "surface_width_m": (0.1, 1000.0),
    "surface_height_m": (0.1, 1000.0),
    "surface_depth_m": (0.0, 1000.0),
    "horizontal_overlap": (1, 90),
    "vertical_overlap": (1, 90),
}

# An uploaded preset is parsed once, then applied here on the rerun, before
# the keyed selectboxes are created.
applied_preset = st.session_state.pop("pending_preset", None)
if applied_preset is not None:
    for key, value in clamp_params(applied_preset["params"], _WIDGET_LIMITS).items():
        st.session_state[key] = value
    if "unit" in applied_preset:
        st.session_state["unit"] = applied_preset["unit"]
    if applied_preset.get("camera") in catalog.cameras:
        st.session_state["format_id"] = catalog.camera(applied_preset["camera"]).sensor_format
        st.session_state["camera_id"] = applied_preset["camera"]
    if applied_preset.get("lens") in catalog.lenses:
        st.session_state["lens_id"] = applied_preset["lens"]
    logger.info("Preset %s applied", applied_preset.get("name"))

# --- Left: equipment + presets
with st.sidebar:
    st.header("📁 Equipment")

    format_ids = list(catalog.sensor_formats)
    format_id = st.selectbox(
        "Sensor format", format_ids, key="format_id",
        format_func=lambda i: catalog.sensor_formats[i].name,
    )
    camera_ids = [c.id for c in catalog.cameras_for_format(format_id)]
    if st.session_state.get("camera_id") not in camera_ids:
        st.session_state.pop("camera_id", None)
    camera_id = st.selectbox("Camera", camera_ids, key="camera_id",
                             format_func=lambda i: catalog.camera(i).label)
    camera = catalog.camera(camera_id) if camera_id else None

    lens_id = st.selectbox(
        "Lens", list(catalog.lenses), key="lens_id",
        format_func=lambda i: f"{catalog.lens(i).label} "
                              f"({catalog.lens(i).focal_length_mm}mm f/{catalog.lens(i).max_aperture})",
    )
    lens = catalog.lens(lens_id) if lens_id else None

    st.markdown("---")
    unit = st.radio("Distance unit", ["m", "ft"], horizontal=True,
                    index=0 if st.session_state["unit"] == "m" else 1)
    st.session_state["unit"] = unit

    st.markdown("---")
    st.write("Save / load preset")
    preset_name = st.text_input("Preset name", value="my_preset")
    preset = build_preset(
        preset_name,
        camera.id if camera else None,
        lens.id if lens else None,
        {k: st.session_state[k] for k in _defaults if k != "unit"},
        unit=unit,
    )
    st.download_button(label="Download preset JSON", data=preset_to_json(preset).encode("utf-8"),
                       file_name=f"{preset['name']}.json", mime="application/json")

    uploaded = st.file_uploader("Upload preset JSON", type=["json"])
    if uploaded is not None and uploaded.file_id != st.session_state.get("preset_file_id"):
        st.session_state["preset_file_id"] = uploaded.file_id
        try:
            loaded = parse_preset(uploaded)
        except PresetError as e:
            st.error(f"Could not load preset: {e}")
        else:
            st.session_state["pending_preset"] = loaded
            st.rerun()
    if applied_preset is not None:
        st.success(f"Preset {applied_preset.get('name', '')} loaded")

if camera is None or lens is None:
    st.info("Select a camera and a lens to start.")
    st.stop()

record = CaptureRecord.from_equipment(camera, lens)

# --- Main UI
st.header("Settings")

col1, col2 = st.columns(2)

with col1:
    apertures = catalog.apertures_for_lens(lens) or [lens.max_aperture]
    current = st.session_state["aperture"]
    aperture = st.selectbox(
        "Aperture (f/)", apertures,
        index=apertures.index(current) if current in apertures else 0,
        format_func=lambda a: f"f/{a:g}",
    )
    st.session_state["aperture"] = aperture
    st.caption(f"Lens range: f/{lens.max_aperture:g} to f/{lens.min_aperture:g}")

with col2:
    shown = meters_to_feet(st.session_state["focus_m"]) if unit == "ft" else st.session_state["focus_m"]
    typed = st.text_input("Focus distance (e.g. 5, 5m, 16ft)", value=f"{shown:.2f}")
    try:
        value, typed_unit = parse_distance_input(typed)
    except ValueError:
        st.warning(f"Could not read distance {typed!r}")
    else:
        st.session_state["focus_m"] = clamp_focus_distance(value, typed_unit or unit)
    focus_m = st.session_state["focus_m"]

tab_dof, tab_plan = st.tabs(["Depth of Field", "Photogrammetry Planner"])

with tab_plan:
    st.subheader("Subject")
    c1, c2, c3 = st.columns(3)
    with c1:
        st.session_state["surface_width_m"] = st.number_input(
            "Width (m)", min_value=0.1, max_value=1000.0, value=float(st.session_state["surface_width_m"]), step=0.1)
    with c2:
        st.session_state["surface_height_m"] = st.number_input(
            "Height (m)", min_value=0.1, max_value=1000.0, value=float(st.session_state["surface_height_m"]), step=0.1)
    with c3:
        st.session_state["surface_depth_m"] = st.number_input(
            "Depth (m, 0 = flat)", min_value=0.0, max_value=1000.0, value=float(st.session_state["surface_depth_m"]), step=0.1)

    c4, c5 = st.columns(2)
    with c4:
        st.session_state["horizontal_overlap"] = st.slider(
            "Horizontal overlap (%)", 1, 90, int(st.session_state["horizontal_overlap"]))
    with c5:
        st.session_state["vertical_overlap"] = st.slider(
            "Vertical overlap (%)", 1, 90, int(st.session_state["vertical_overlap"]))

subject = SubjectDimensions(
    st.session_state["surface_width_m"],
    st.session_state["surface_height_m"],
    st.session_state["surface_depth_m"],
)

try:
    result = plan_capture(record, aperture, focus_m, subject,
                          st.session_state["horizontal_overlap"],
                          st.session_state["vertical_overlap"])
except InvalidConfigurationError as e:
    logger.info("Invalid configuration: %s", e)
    st.error(f"Cannot compute with these settings: {e}")
    st.stop()

for w in result.warnings:
    st.warning(f"Warning: {w}")

dof = result.dof
if dof is None:
    st.info("This lens has no focal length set, depth of field cannot be computed.")
    st.stop()

with tab_dof:
    st.markdown("### Results")
    st.write(f"**{camera.label}** (crop {camera.effective_crop_factor:g}, "
             f"CoC={circle_of_confusion(camera.effective_crop_factor):.4f} mm) · **{lens.label}**")
    m1, m2 = st.columns(2)
    m1.metric("Hyperfocal H", format_distance(dof.hyperfocal_m, unit, digits=2))
    m2.metric("Field of view", f"{result.field_of_view_deg:.1f}°")
    m3, m4, m5 = st.columns(3)
    m3.metric("Near limit", format_distance(dof.near_limit_m, unit, 2, focus_m))
    m4.metric("Far limit", format_distance(dof.far_limit_m, unit, 2, focus_m))
    m5.metric("Total DOF", format_distance(dof.total_dof_m, unit, 2, focus_m))
    st.write(describe_in_focus_range(dof, unit))

    m6, m7 = st.columns(2)
    m6.metric("Ground coverage", format_footprint(result.footprint, unit))
    m7.metric("GSD", format_gsd(result.gsd_mm))
    quality = gsd_quality(result.gsd_mm)
    if quality:
        st.caption({"high": "High detail capture",
                    "good": "Good for most applications",
                    "low": "Lower resolution capture"}[quality])

    st.markdown("---")
    st.header("Depth of field along the camera axis")

    near = dof.near_limit_m
    far = dof.far_limit_m
    H = dof.hyperfocal_m
    far_x = far if not math.isinf(far) else max(focus_m + 10, H * 2)

    fig = go.Figure()

    # Fill in-focus region between near and far distances
    fig.add_trace(go.Scatter(
        x=[near, far_x, far_x, near],
        y=[0, 0, 0.05, 0.05],
        fill='toself',
        fillcolor='rgba(135, 206, 250, 0.4)',
        line=dict(color='rgba(135, 206, 250, 0)'),
        hoverinfo='skip',
        name='In-focus region' if not math.isinf(far) else 'In-focus region (extends to ∞)'
    ))

    fig.add_trace(go.Scatter(
        x=[focus_m], y=[0.025],
        mode='markers+text',
        name='Focus Point',
        marker=dict(color='red', size=10),
        text=[f"Focus\n{format_distance(focus_m, unit, 2)}"],
        textposition='bottom center'
    ))

    fig.add_trace(go.Scatter(
        x=[near], y=[0.025],
        mode='markers+text',
        name='Near Limit',
        marker=dict(color='blue', size=8),
        text=[f"Near\n{format_distance(near, unit, 2)}"],
        textposition='top center'
    ))

    fig.add_trace(go.Scatter(
        x=[far_x], y=[0.025],
        mode='markers+text',
        name='Far Limit',
        marker=dict(color='orange', size=8),
        text=[f"Far\n{INFINITY_SYMBOL if math.isinf(far) else format_distance(far, unit, 2)}"],
        textposition='top center'
    ))

    fig.add_trace(go.Scatter(
        x=[H], y=[0.025],
        mode='markers+text',
        name='Hyperfocal Distance',
        marker=dict(color='green', size=8, symbol='triangle-up'),
        text=[f"H = {format_distance(H, unit, 2)}"],
        textposition='bottom center'
    ))

    fig.update_layout(
        title="Depth of Field (1D view along camera axis)",
        xaxis=dict(
            title="Distance from camera (m)",
            type="log",
            showgrid=True,
            gridcolor='lightgray',
            zeroline=False
        ),
        yaxis=dict(
            visible=False,
            range=[-0.02, 0.1]
        ),
        showlegend=False,
        margin=dict(l=40, r=40, t=60, b=40),
        template="plotly_white"
    )
    st.plotly_chart(fig, use_container_width=True)

    with st.expander("Near/far limits vs. focus distance"):
        coc = circle_of_confusion(camera.effective_crop_factor)
        x_m = np.logspace(math.log10(0.1), math.log10(100), 300)  # 0.1 m to 100 m
        near_curve, far_curve = dof_curves(lens.focal_length_mm, aperture, coc, x_m)

        fig2, ax = plt.subplots(figsize=(7, 4))
        ax.set_xscale('log')
        ax.set_yscale('log')
        ax.plot(x_m, near_curve, label='Near limit', linewidth=1)
        ax.plot(x_m, np.where(np.isinf(far_curve), np.nan, far_curve), label='Far limit', linewidth=1)
        ax.axvline(H, linestyle='--', linewidth=0.8, label=f'H = {H:.2f} m')
        ax.scatter([focus_m], [near], marker='o')
        if not math.isinf(far):
            ax.scatter([focus_m], [far], marker='o')
        ax.set_xlabel("Focus distance (m)")
        ax.set_ylabel("Limit of acceptable focus (m)")
        ax.legend()
        ax.grid(True, which='both', ls=':', linewidth=0.4)
        st.pyplot(fig2)
        plt.close(fig2)

    st.caption("Classical thin-lens circle-of-confusion model. Distances shown as ∞ past "
               "15x the focus distance or 1000 m are a display convention.")

with tab_plan:
    plan = result.plan
    area_unit = "m²" if unit == "m" else "ft²"
    area = plan.total_surface_area_m2 if unit == "m" else plan.total_surface_area_m2 * meters_to_feet(1) ** 2

    st.markdown("### Plan")
    r1, r2, r3 = st.columns(3)
    r1.metric("Total surface area", f"{area:.1f} {area_unit}")
    r2.metric("Unique area per image", format_footprint(plan.unique_coverage, unit))
    r3.metric("Images required", plan.total_images)
    st.caption(f"{plan.images_across} across × {plan.images_down} down"
               + (" × 6 faces (box approximation, shared edges not deducted)"
                  if subject.depth_m > 0 else ""))

    st.markdown("**Technical details**")
    st.write(f"GSD: {format_gsd(result.gsd_mm)}")
    st.write(f"Resolution: {camera.image_width_px} × {camera.image_height_px} ({camera.megapixels:g}MP)")
    if result.recommended_aperture is not None:
        note = "" if result.recommended_aperture == aperture else f" (current: f/{aperture:g})"
        st.write(f"Recommended aperture: f/{result.recommended_aperture:g}{note}")
    if result.storage is not None:
        st.write(f"Estimated storage: JPEG {result.storage.jpeg_display} · RAW {result.storage.raw_display}")
        st.caption(f"Rough estimate using the '{result.storage.profile}' file-size profile")
