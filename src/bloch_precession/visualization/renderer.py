"""PyOpenGL 3D renderer for the Bloch precession simulation.

Draws the Bloch sphere wireframe, coordinate axes, effective-field arrow,
state vector and trail. The render loop calls BlochSimulation.tick() once
per frame and then only reads the simulation to draw it.
"""

from __future__ import annotations

import ctypes
import logging
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

try:
    import glfw
    from OpenGL.GL import (
        GL_ARRAY_BUFFER,
        GL_BLEND,
        GL_COLOR_BUFFER_BIT,
        GL_DEPTH_BUFFER_BIT,
        GL_DEPTH_TEST,
        GL_DYNAMIC_DRAW,
        GL_FALSE,
        GL_FLOAT,
        GL_FRAGMENT_SHADER,
        GL_LINE_STRIP,
        GL_LINES,
        GL_ONE_MINUS_SRC_ALPHA,
        GL_POINTS,
        GL_PROGRAM_POINT_SIZE,
        GL_SRC_ALPHA,
        GL_STATIC_DRAW,
        GL_VERTEX_SHADER,
        glAttachShader,
        glBindBuffer,
        glBindVertexArray,
        glBlendFunc,
        glBufferData,
        glClear,
        glClearColor,
        glCompileShader,
        glCreateProgram,
        glCreateShader,
        glDeleteProgram,
        glDeleteShader,
        glDrawArrays,
        glEnable,
        glEnableVertexAttribArray,
        glGenBuffers,
        glGenVertexArrays,
        glGetProgramInfoLog,
        glGetShaderInfoLog,
        glGetUniformLocation,
        glLinkProgram,
        glShaderSource,
        glUniform1f,
        glUniform4f,
        glUniformMatrix4fv,
        glUseProgram,
        glVertexAttribPointer,
    )

    HAS_GL = True
except ImportError:
    HAS_GL = False

import pyrr

from bloch_precession.visualization.geometry import (
    axes_vertices,
    equator_vertices,
    field_arrow_vertices,
    sphere_wireframe_vertices,
    state_vector_vertices,
)

if TYPE_CHECKING:
    from bloch_precession.core.simulation import BlochSimulation

logger = logging.getLogger(__name__)

PARAM_INCREMENT_MHZ = 0.1

# RGBA
AXIS_COLOR = (0.31, 0.31, 0.31, 1.0)
WIREFRAME_COLOR = (0.24, 0.24, 0.24, 0.31)
EQUATOR_COLOR = (0.39, 0.39, 0.39, 0.47)
FIELD_COLOR = (0.47, 0.47, 0.47, 1.0)
STATE_COLOR = (1.0, 1.0, 1.0, 1.0)
TRAIL_COLOR = (0.78, 0.78, 0.78, 0.59)


def _compile_shader(source: str, shader_type: int) -> int:
    """Compile a GLSL shader from source."""
    shader = glCreateShader(shader_type)
    glShaderSource(shader, source)
    glCompileShader(shader)
    info_log = glGetShaderInfoLog(shader)
    if info_log:
        raise RuntimeError(f"Shader compile error: {info_log.decode()}")
    return shader


def _create_program(vertex_src: str, fragment_src: str) -> int:
    """Create a shader program from vertex and fragment sources."""
    vs = _compile_shader(vertex_src, GL_VERTEX_SHADER)
    fs = _compile_shader(fragment_src, GL_FRAGMENT_SHADER)
    program = glCreateProgram()
    glAttachShader(program, vs)
    glAttachShader(program, fs)
    glLinkProgram(program)
    info_log = glGetProgramInfoLog(program)
    if info_log:
        raise RuntimeError(f"Program link error: {info_log.decode()}")
    glDeleteShader(vs)
    glDeleteShader(fs)
    return program


class _LineBuffer:
    """One VAO/VBO pair holding float32 xyz vertices."""

    def __init__(self, vertices: NDArray[np.float32] | None = None, usage: int = 0) -> None:
        self.vao = glGenVertexArrays(1)
        self.vbo = glGenBuffers(1)
        self.count = 0
        self.usage = usage or GL_DYNAMIC_DRAW

        glBindVertexArray(self.vao)
        glBindBuffer(GL_ARRAY_BUFFER, self.vbo)
        glVertexAttribPointer(0, 3, GL_FLOAT, GL_FALSE, 3 * 4, ctypes.c_void_p(0))
        glEnableVertexAttribArray(0)
        glBindVertexArray(0)

        if vertices is not None:
            self.upload(vertices)

    def upload(self, vertices: NDArray[np.float32]) -> None:
        data = np.ascontiguousarray(vertices, dtype=np.float32)
        self.count = len(data)
        if self.count == 0:
            return
        glBindBuffer(GL_ARRAY_BUFFER, self.vbo)
        glBufferData(GL_ARRAY_BUFFER, data.nbytes, data, self.usage)

    def draw(self, mode: int) -> None:
        if self.count == 0:
            return
        glBindVertexArray(self.vao)
        glDrawArrays(mode, 0, self.count)


class BlochRenderer:
    """PyOpenGL 3D renderer for a BlochSimulation.

    Keyboard controls:
        SPACE       -- play/pause
        R           -- reset to ground state
        UP/DOWN     -- Rabi frequency +/- 0.1 MHz
        RIGHT/LEFT  -- detuning +/- 0.1 MHz
        ESC         -- close window
    Mouse drag orbits the camera, scroll zooms.
    """

    def __init__(
        self,
        sim: BlochSimulation,
        width: int = 800,
        height: int = 800,
    ) -> None:
        if not HAS_GL:
            raise ImportError("PyOpenGL and glfw required for 3D rendering")

        self.sim = sim
        self.width = width
        self.height = height

        # Camera state
        self.camera_distance: float = 4.0
        self.camera_azimuth: float = 30.0
        self.camera_elevation: float = 20.0

        # Mouse state
        self._mouse_pressed: bool = False
        self._last_mouse_x: float = 0.0
        self._last_mouse_y: float = 0.0

        # GL handles
        self.window = None
        self.program: int = 0
        self._axes: _LineBuffer | None = None
        self._wireframe: _LineBuffer | None = None
        self._equator: _LineBuffer | None = None
        self._field: _LineBuffer | None = None
        self._state: _LineBuffer | None = None
        self._trail: _LineBuffer | None = None

    def initialize(self) -> None:
        """Set up GLFW window and OpenGL context."""
        if not glfw.init():
            raise RuntimeError("Failed to initialize GLFW")

        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, glfw.TRUE)

        self.window = glfw.create_window(
            self.width, self.height, self._title(), None, None
        )
        if not self.window:
            glfw.terminate()
            raise RuntimeError("Failed to create GLFW window")

        glfw.make_context_current(self.window)
        logger.debug("GLFW window created (%dx%d)", self.width, self.height)

        glfw.set_key_callback(self.window, self._key_callback)
        glfw.set_mouse_button_callback(self.window, self._mouse_button_callback)
        glfw.set_scroll_callback(self.window, self._scroll_callback)
        glfw.set_cursor_pos_callback(self.window, self._cursor_callback)

        glClearColor(0.0, 0.0, 0.0, 1.0)
        glEnable(GL_DEPTH_TEST)
        glEnable(GL_BLEND)
        glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)
        glEnable(GL_PROGRAM_POINT_SIZE)

        self._compile_shaders()
        self._setup_buffers()

    def _compile_shaders(self) -> None:
        from bloch_precession.visualization.shaders import (
            LINE_FRAGMENT_SHADER,
            LINE_VERTEX_SHADER,
        )

        self.program = _create_program(LINE_VERTEX_SHADER, LINE_FRAGMENT_SHADER)

    def _setup_buffers(self) -> None:
        """Static geometry is uploaded once; field, state and trail per frame."""
        self._axes = _LineBuffer(axes_vertices(), GL_STATIC_DRAW)
        self._wireframe = _LineBuffer(sphere_wireframe_vertices(), GL_STATIC_DRAW)
        self._equator = _LineBuffer(equator_vertices(), GL_STATIC_DRAW)
        self._field = _LineBuffer()
        self._state = _LineBuffer()
        self._trail = _LineBuffer()

    def _update_dynamic_buffers(self) -> None:
        self._field.upload(field_arrow_vertices(self.sim.effective_field()))
        self._state.upload(state_vector_vertices(self.sim.current_cartesian()))
        self._trail.upload(self.sim.trail.as_array())

    def _build_view_matrix(self) -> NDArray[np.float32]:
        """Camera orbiting the origin with +z (excited state) up."""
        az = np.radians(self.camera_azimuth)
        el = np.radians(self.camera_elevation)
        eye = np.array([
            self.camera_distance * np.cos(el) * np.cos(az),
            self.camera_distance * np.cos(el) * np.sin(az),
            self.camera_distance * np.sin(el),
        ], dtype=np.float32)
        target = np.array([0.0, 0.0, 0.0], dtype=np.float32)
        up = np.array([0.0, 0.0, 1.0], dtype=np.float32)
        return pyrr.matrix44.create_look_at(eye, target, up)

    def _build_projection_matrix(self) -> NDArray[np.float32]:
        return pyrr.matrix44.create_perspective_projection_matrix(
            45.0, self.width / self.height, 0.1, 100.0
        )

    def _set_color(self, rgba: tuple[float, float, float, float]) -> None:
        glUniform4f(glGetUniformLocation(self.program, "color"), *rgba)

    def render_frame(self) -> None:
        """Draw one frame. Reads the simulation, never advances it."""
        self._update_dynamic_buffers()

        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        glUseProgram(self.program)
        glUniformMatrix4fv(
            glGetUniformLocation(self.program, "view"),
            1, GL_FALSE, self._build_view_matrix(),
        )
        glUniformMatrix4fv(
            glGetUniformLocation(self.program, "projection"),
            1, GL_FALSE, self._build_projection_matrix(),
        )
        glUniform1f(glGetUniformLocation(self.program, "point_size"), 8.0)

        self._set_color(AXIS_COLOR)
        self._axes.draw(GL_LINES)
        self._set_color(WIREFRAME_COLOR)
        self._wireframe.draw(GL_LINES)
        self._set_color(EQUATOR_COLOR)
        self._equator.draw(GL_LINES)
        self._set_color(FIELD_COLOR)
        self._field.draw(GL_LINES)
        self._set_color(STATE_COLOR)
        self._state.draw(GL_LINES)
        self._state.draw(GL_POINTS)
        if self._trail.count >= 2:
            self._set_color(TRAIL_COLOR)
            self._trail.draw(GL_LINE_STRIP)

        glBindVertexArray(0)
        glfw.swap_buffers(self.window)

    def run(self) -> None:
        """Main render loop: tick the simulation, then draw."""
        self.initialize()

        while not glfw.window_should_close(self.window):
            glfw.poll_events()
            self.sim.tick()
            self.render_frame()

        self._cleanup()

    def _title(self) -> str:
        p = self.sim.params
        status = "running" if self.sim.running else "paused"
        return (
            f"Bloch Precession -- Rabi {p.rabi_freq:.1f} MHz, "
            f"detuning {p.detuning:.1f} MHz ({status})"
        )

    def _key_callback(self, window, key, scancode, action, mods) -> None:  # type: ignore[no-untyped-def]
        """Handle keyboard input."""
        if action not in (glfw.PRESS, glfw.REPEAT):
            return

        p = self.sim.params
        if key == glfw.KEY_ESCAPE:
            glfw.set_window_should_close(window, True)
        elif key == glfw.KEY_SPACE and action == glfw.PRESS:
            self.sim.toggle_running()
        elif key == glfw.KEY_R and action == glfw.PRESS:
            self.sim.reset()
        elif key == glfw.KEY_UP:
            self.sim.set_rabi_frequency(round(p.rabi_freq + PARAM_INCREMENT_MHZ, 6))
        elif key == glfw.KEY_DOWN:
            self.sim.set_rabi_frequency(round(p.rabi_freq - PARAM_INCREMENT_MHZ, 6))
        elif key == glfw.KEY_RIGHT:
            self.sim.set_detuning(round(p.detuning + PARAM_INCREMENT_MHZ, 6))
        elif key == glfw.KEY_LEFT:
            self.sim.set_detuning(round(p.detuning - PARAM_INCREMENT_MHZ, 6))
        glfw.set_window_title(window, self._title())

    def _mouse_button_callback(self, window, button, action, mods) -> None:  # type: ignore[no-untyped-def]
        """Handle mouse button for orbit."""
        if button == glfw.MOUSE_BUTTON_LEFT:
            self._mouse_pressed = action == glfw.PRESS
            if self._mouse_pressed:
                self._last_mouse_x, self._last_mouse_y = glfw.get_cursor_pos(window)

    def _scroll_callback(self, window, xoff, yoff) -> None:  # type: ignore[no-untyped-def]
        """Zoom in/out."""
        self.camera_distance = max(1.5, self.camera_distance - yoff * 0.3)

    def _cursor_callback(self, window, xpos, ypos) -> None:  # type: ignore[no-untyped-def]
        """Orbit camera on drag."""
        if not self._mouse_pressed:
            return
        dx = xpos - self._last_mouse_x
        dy = ypos - self._last_mouse_y
        self.camera_azimuth -= dx * 0.3
        self.camera_elevation = max(-89, min(89, self.camera_elevation + dy * 0.3))
        self._last_mouse_x = xpos
        self._last_mouse_y = ypos

    def _cleanup(self) -> None:
        """Destroy window and terminate GLFW."""
        if self.program:
            glDeleteProgram(self.program)
        glfw.terminate()
