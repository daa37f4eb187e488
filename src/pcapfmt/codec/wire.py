"""
Fixed binary layouts of the libpcap file format.

Reference: https://wiki.wireshark.org/Development/LibpcapFileFormat

File structure:
- 24-byte file header
- Repeated packet records:
  - 16-byte record header
  - Packet data (incl_len bytes, no padding)

Every multi-byte field in a file uses the same byte order. The functions
here take that byte order ('<' or '>') explicitly; the reader and writer
pick it once per stream.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

# Only supported version. It has not changed since 1998.
PCAP_VERSION_MAJOR = 2
PCAP_VERSION_MINOR = 4

FILE_HEADER_SIZE = 24
RECORD_HEADER_SIZE = 16

U32_MAX = 0xFFFFFFFF

# magic, version_major, version_minor, thiszone, sigfigs, snaplen, network
_FILE_HEADER_FORMAT = 'IHHiIII'
# ts_sec, ts_subsec, incl_len, orig_len
_RECORD_HEADER_FORMAT = 'IIII'

_FILE_HEADER_STRUCTS = {
    '<': struct.Struct('<' + _FILE_HEADER_FORMAT),
    '>': struct.Struct('>' + _FILE_HEADER_FORMAT),
}
_RECORD_HEADER_STRUCTS = {
    '<': struct.Struct('<' + _RECORD_HEADER_FORMAT),
    '>': struct.Struct('>' + _RECORD_HEADER_FORMAT),
}


@dataclass(frozen=True)
class FileHeader:
    """The 24-byte file header exactly as stored (after byte order is applied)."""
    magic: int
    version_major: int
    version_minor: int
    thiszone: int
    """GMT to local correction, in seconds."""
    sigfigs: int
    """Accuracy of timestamps. Unused, written as 0."""
    snaplen: int
    network: int
    """Link type."""


@dataclass(frozen=True)
class RecordHeader:
    """The 16-byte header preceding every packet's data."""
    ts_sec: int
    ts_subsec: int
    """Microseconds or nanoseconds, depending on the file's magic."""
    incl_len: int
    """Bytes of packet data stored in the file."""
    orig_len: int
    """Bytes of the packet on the wire."""


def pack_file_header(header: FileHeader, byte_order: str) -> bytes:
    return _FILE_HEADER_STRUCTS[byte_order].pack(
        header.magic,
        header.version_major,
        header.version_minor,
        header.thiszone,
        header.sigfigs,
        header.snaplen,
        header.network,
    )


def unpack_file_header(data: bytes, byte_order: str) -> FileHeader:
    return FileHeader(*_FILE_HEADER_STRUCTS[byte_order].unpack(data))


def pack_record_header(header: RecordHeader, byte_order: str) -> bytes:
    return _RECORD_HEADER_STRUCTS[byte_order].pack(
        header.ts_sec,
        header.ts_subsec,
        header.incl_len,
        header.orig_len,
    )


def unpack_record_header(data: bytes, byte_order: str) -> RecordHeader:
    return RecordHeader(*_RECORD_HEADER_STRUCTS[byte_order].unpack(data))


class Linktype(IntEnum):
    """
    Known link-layer header types (from pcap/bpf.h).

    See http://www.tcpdump.org/linktypes.html for descriptions. Files may
    carry values that are not listed here; the codec treats them as opaque.
    """
    NULL = 0
    ETHERNET = 1
    AX25 = 3
    IEEE802_5 = 6
    ARCNET_BSD = 7
    SLIP = 8
    PPP = 9
    FDDI = 10
    PPP_HDLC = 50
    PPP_ETHER = 51
    ATM_RFC1483 = 100
    RAW = 101
    C_HDLC = 104
    IEEE802_11 = 105
    FRELAY = 107
    LOOP = 108
    LINUX_SLL = 113
    LTALK = 114
    PFLOG = 117
    IEEE802_11_PRISM = 119
    IP_OVER_FC = 122
    SUNATM = 123
    IEEE802_11_RADIOTAP = 127
    ARCNET_LINUX = 129
    APPLE_IP_OVER_IEEE1394 = 138
    MTP2_WITH_PHDR = 139
    MTP2 = 140
    MTP3 = 141
    SCCP = 142
    DOCSIS = 143
    LINUX_IRDA = 144
    USER00_LINKTYPE = 147
    USER01_LINKTYPE = 148
    USER02_LINKTYPE = 149
    USER03_LINKTYPE = 150
    USER04_LINKTYPE = 151
    USER05_LINKTYPE = 152
    USER06_LINKTYPE = 153
    USER07_LINKTYPE = 154
    USER08_LINKTYPE = 155
    USER09_LINKTYPE = 156
    USER10_LINKTYPE = 157
    USER11_LINKTYPE = 158
    USER12_LINKTYPE = 159
    USER13_LINKTYPE = 160
    USER14_LINKTYPE = 161
    USER15_LINKTYPE = 162
    IEEE802_11_AVS = 163
    BACNET_MS_TP = 165
    PPP_PPPD = 166
    GPRS_LLC = 169
    GPF_T = 170
    GPF_F = 171
    LINUX_LAPD = 177
    BLUETOOTH_HCI_H4 = 187
    USB_LINUX = 189
    PPI = 192
    IEEE802_15_4 = 195
    SITA = 196
    ERF = 197
    BLUETOOTH_HCI_H4_WITH_PHDR = 201
    AX25_KISS = 202
    LAPD = 203
    PPP_WITH_DIR = 204
    C_HDLC_WITH_DIR = 205
    FRELAY_WITH_DIR = 206
    IPMB_LINUX = 209
    IEEE802_15_4_NONASK_PHY = 215
    USB_LINUX_MMAPPED = 220
    FC_2 = 224
    FC_2_WITH_FRAME_DELIMS = 225
    IPNET = 226
    CAN_SOCKETCAN = 227
    IPV4 = 228
    IPV6 = 229
    IEEE802_15_4_NOFCS = 230
    DBUS = 231
    DVB_CI = 235
    MUX27010 = 236
    STANAG_5066_D_PDU = 237
    NFLOG = 239
    NETANALYZER = 240
    NETANALYZER_TRANSPARENT = 241
    IPOIB = 242
    MPEG_2_TS = 243
    NG40 = 244
    NFC_LLCP = 245
    INFINIBAND = 247
    SCTP = 248
    USBPCAP = 249
    RTAC_SERIAL = 250
    BLUETOOTH_LE_LL = 251
    NETLINK = 253
    BLUETOOTH_LINUX_MONITOR = 254
    BLUETOOTH_BREDR_BB = 255
    BLUETOOTH_LE_LL_WITH_PHDR = 256
    PROFIBUS_DL = 257
    PKTAP = 258
    EPON = 259
    IPMI_HPM_2 = 260
    ZWAVE_R1_R2 = 261
    ZWAVE_R3 = 262
    WATTSTOPPER_DLM = 263
    ISO_14443 = 264
    RDS = 265
    USB_DARWIN = 266


def linktype_name(value: int) -> str:
    """Return the Linktype name for value, or 'UNKNOWN(<value>)'."""
    try:
        return Linktype(value).name
    except ValueError:
        return f"UNKNOWN({value})"
