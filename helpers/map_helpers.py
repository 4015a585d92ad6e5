# helpers/map_helpers.py
import logging
from typing import Any, Dict, List, Optional

import folium
from jinja2 import Template

from dronesim.constants import DroneConstants
from dronesim.geodesy import GeodesicPath, LatLng, distance_m
from dronesim.simulation.data_models import DroneHealth, SimulationState

HEALTH_COLORS = {
    DroneHealth.NOMINAL: "#10b981",
    DroneHealth.WARNING: "#f59e0b",
    DroneHealth.CRITICAL: "#ef4444",
}

class TrailRecorder:
    """
    Path history for the map. Only appends a point once the drone has moved
    more than `min_displacement_m` from the last recorded point.
    """

    def __init__(self, min_displacement_m: float = DroneConstants.TRAIL_MIN_DISPLACEMENT_M):
        self.min_displacement_m = min_displacement_m
        self._points: List[LatLng] = []
        self._run_id: Optional[int] = None

    @property
    def points(self) -> List[LatLng]:
        return list(self._points)

    def clear(self):
        self._points = []

    def record(self, position: LatLng, run_id: Optional[int] = None) -> bool:
        """Returns True when the point was appended."""
        if run_id is not None and run_id != self._run_id:
            self._run_id = run_id
            self.clear()
        if self._points:
            last = self._points[-1]
            moved = distance_m(last, position)
            if moved <= self.min_displacement_m:
                return False
        self._points.append((position[0], position[1]))
        return True

def format_eta(eta_sec: Optional[float]) -> str:
    if eta_sec is None:
        return "--:--"
    total = int(round(eta_sec))
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

def state_to_json(state: SimulationState) -> Dict[str, Any]:
    return {
        'lat': state.position[0],
        'lng': state.position[1],
        'status': state.status.value,
        'progress': state.progress,
        'distance_traveled_m': state.distance_traveled_m,
        'total_distance_m': state.total_distance_m,
        'remaining_m': state.remaining_m,
        'speed_kmh': state.current_speed_kmh,
        'elapsed_sec': state.elapsed_run_sec,
        'eta_sec': state.eta_sec,
        'eta_display': format_eta(state.eta_sec),
        'altitude_m': state.altitude_m,
        'battery_pct': state.battery_pct,
        'health': state.health.value,
    }

class LiveTelemetryLayer(folium.MacroElement):
    """
    Control panel plus a polling script that keeps the map in step with the
    simulation worker. Every `poll_interval_ms` the latest payload is read
    from `position_url`; the drone marker and the flown trail are moved to
    match and the panel is refreshed. Panel buttons POST `{action, value}`
    to `control_url`. A payload whose start/end differ from the rendered
    route reloads the page so the planned route is redrawn.
    """
    _template = Template("""
{% macro html(this, kwargs) %}
<div id="sim-panel" style="position:absolute; top:10px; right:10px; z-index:1000; background:rgba(15,23,42,0.9);
     color:#e2e8f0; font:13px sans-serif; padding:10px 12px; border-radius:8px; min-width:230px;">
  <div><b id="sim-status">{{ this.telemetry.status }}</b></div>
  <div>Speed: <span id="sim-speed">{{ '%.1f'|format(this.telemetry.speed_kmh) }}</span> km/h</div>
  <div>Traveled: <span id="sim-distance">{{ '%.0f'|format(this.telemetry.distance_traveled_m) }}</span> / <span id="sim-total">{{ '%.0f'|format(this.telemetry.total_distance_m) }}</span> m</div>
  <div>ETA: <span id="sim-eta">{{ this.telemetry.eta_display }}</span></div>
  <div>Altitude: <span id="sim-altitude">{{ '%.0f'|format(this.telemetry.altitude_m) }}</span> m</div>
  <div>Battery: <span id="sim-battery">{{ '%.1f'|format(this.telemetry.battery_pct) }}</span>% (<span id="sim-health">{{ this.telemetry.health }}</span>)</div>
  <div>Range: <span id="sim-range">{{ '%.0f'|format(this.telemetry.range_remaining_m) }}</span> m</div>
  <div style="margin-top:8px;">
    <button id="sim-start" onclick="simControl('start')">Start</button>
    <button onclick="simControl('pause')">Pause</button>
    <button onclick="simControl('reset')">Reset</button>
  </div>
  <div style="margin-top:6px;">Time
    {% for scale in this.time_scales %}<button onclick="simControl('time_scale', {{ scale }})">{{ scale }}x</button>{% endfor %}
  </div>
  <div style="margin-top:6px;">km/h
    {% for speed in this.speed_presets %}<button onclick="simControl('speed', {{ speed }})">{{ speed }}</button>{% endfor %}
  </div>
</div>
{% endmacro %}

{% macro script(this, kwargs) %}
(function() {
    var drone = {{ this.marker.get_name() }};
    var trail = {{ this.trail.get_name() }};
    var colors = {{ this.colors|tojson }};
    var routeKey = JSON.stringify([{{ this.telemetry.start|tojson }}, {{ this.telemetry.end|tojson }}]);

    function setText(id, text) { document.getElementById(id).textContent = text; }

    function render(data) {
        if (JSON.stringify([data.start, data.end]) !== routeKey) {
            window.location.reload();
            return;
        }
        drone.setLatLng([data.lat, data.lng]);
        drone.setStyle({color: colors[data.health], fillColor: colors[data.health]});
        trail.setLatLngs(data.trail.length ? data.trail : [[data.lat, data.lng]]);
        setText('sim-status', data.status);
        setText('sim-speed', data.speed_kmh.toFixed(1));
        setText('sim-distance', data.distance_traveled_m.toFixed(0));
        setText('sim-total', data.total_distance_m.toFixed(0));
        setText('sim-eta', data.eta_display);
        setText('sim-altitude', data.altitude_m.toFixed(0));
        setText('sim-battery', data.battery_pct.toFixed(1));
        setText('sim-health', data.health);
        setText('sim-range', data.range_remaining_m.toFixed(0));
        var start = document.getElementById('sim-start');
        start.disabled = data.running || data.status === 'Arrived';
        start.textContent = (!data.running && data.distance_traveled_m > 0) ? 'Resume' : 'Start';
    }

    function poll() {
        fetch('{{ this.position_url }}')
            .then(function(response) { return response.json(); })
            .then(render)
            .catch(function(err) { console.warn('Telemetry poll failed', err); });
    }

    window.simControl = function(action, value) {
        var body = {action: action};
        if (value !== undefined) { body.value = value; }
        fetch('{{ this.control_url }}', {
            method: 'POST',
            headers: {'Content-Type': 'application/json'},
            body: JSON.stringify(body)
        })
            .then(function(response) { return response.json(); })
            .then(function(result) { if (!result.success) { console.warn(result.error); } })
            .catch(function(err) { console.warn('Control request failed', err); });
    };

    setInterval(poll, {{ this.poll_interval_ms }});
    poll();
})();
{% endmacro %}
""")

    def __init__(self, telemetry: Dict[str, Any], marker, trail,
                 position_url: str = '/position', control_url: str = '/control',
                 poll_interval_ms: int = DroneConstants.DISPLAY['POLL_INTERVAL_MS']):
        super().__init__()
        self._name = 'LiveTelemetryLayer'
        self.telemetry = telemetry
        self.marker = marker
        self.trail = trail
        self.position_url = position_url
        self.control_url = control_url
        self.poll_interval_ms = int(poll_interval_ms)
        self.colors = {health.value: color for health, color in HEALTH_COLORS.items()}
        self.time_scales = DroneConstants.DISPLAY['TIME_SCALE_PRESETS']
        self.speed_presets = DroneConstants.DISPLAY['SPEED_PRESETS_KMH']

def build_route_map(telemetry: Dict[str, Any], position_url: str = '/position',
                    control_url: str = '/control') -> folium.Map:
    """
    Interactive map for one published telemetry payload: the planned route,
    the flown trail, the drone marker and the live control panel.

    Route, drone and trail all come from the same payload, so the page never
    mixes a new path with the state of a previous run.
    """
    path = GeodesicPath(tuple(telemetry['start']), tuple(telemetry['end']))
    center = path.point_at_distance(path.length_m / 2)
    route_map = folium.Map(location=list(center), zoom_start=15, max_zoom=19, tiles="OpenStreetMap")

    folium.PolyLine(
        locations=path.sample(), color="#94a3b8", weight=3, opacity=0.8, tooltip="Planned route"
    ).add_to(route_map)

    position = [telemetry['lat'], telemetry['lng']]
    # folium rejects an empty polyline; the first poll replaces this vertex
    trail = folium.PolyLine(
        locations=telemetry['trail'] or [position], color="#10b981", weight=4, opacity=0.9, tooltip="Flown"
    ).add_to(route_map)

    folium.Marker(location=list(path.start), tooltip="Start",
                  icon=folium.Icon(color='green', icon='home', prefix='fa')).add_to(route_map)
    folium.Marker(location=list(path.end), tooltip="Destination",
                  icon=folium.Icon(color='red', icon='flag', prefix='fa')).add_to(route_map)

    color = HEALTH_COLORS[DroneHealth(telemetry['health'])]
    drone = folium.CircleMarker(
        location=position, radius=8, color=color, fill=True, fill_color=color, fill_opacity=0.9, tooltip="Drone"
    ).add_to(route_map)

    LiveTelemetryLayer(telemetry, drone, trail, position_url=position_url, control_url=control_url).add_to(route_map)

    route_map.fit_bounds([list(path.start), list(path.end)], padding=(30, 30))
    logging.debug("Route map rendered.")
    return route_map
