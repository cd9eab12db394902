"""GLSL sources for the Bloch sphere renderer."""

LINE_VERTEX_SHADER = """
#version 330 core
layout(location = 0) in vec3 position;

uniform mat4 view;
uniform mat4 projection;
uniform float point_size;

void main() {
    gl_Position = projection * view * vec4(position, 1.0);
    gl_PointSize = point_size;
}
"""

LINE_FRAGMENT_SHADER = """
#version 330 core
uniform vec4 color;

out vec4 frag_color;

void main() {
    frag_color = color;
}
"""
